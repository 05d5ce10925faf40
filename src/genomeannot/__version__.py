"""Version information for genomeannot."""

__version__ = "0.3.0"
__author__ = "genomeannot developers"
__license__ = "GPL-2.0"
__description__ = "Genome annotation pipeline: BUSCO, RepeatModeler/RepeatMasker, STAR and BRAKER3"
