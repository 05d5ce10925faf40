"""genomeannot: resumable BUSCO -> repeat masking -> BRAKER3 annotation pipeline."""

from genomeannot.__version__ import __version__

__all__ = ["__version__"]
