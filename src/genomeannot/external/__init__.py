"""External tool wrappers (genomeannot).

Each wrapper builds ``Invocation`` requests; ``ToolInvoker`` runs them:
- Busco: assembly completeness
- RepeatModeler / RepeatMasker: repeat library and soft-masking
- Star / Samtools: RNA-seq alignment and BAM indexing
- Braker / Agat: gene prediction and GTF -> GFF3 (inside Apptainer)
- Apptainer: container image build
"""

from genomeannot.external.base import ExternalTool, Invocation, ToolInvoker
from genomeannot.external.busco import Busco
from genomeannot.external.repeatmodeler import RepeatModeler
from genomeannot.external.repeatmasker import RepeatMasker
from genomeannot.external.star import Star
from genomeannot.external.samtools import Samtools
from genomeannot.external.braker import Braker
from genomeannot.external.agat import Agat
from genomeannot.external.apptainer import Apptainer

__all__ = [
    "ExternalTool",
    "Invocation",
    "ToolInvoker",
    "Busco",
    "RepeatModeler",
    "RepeatMasker",
    "Star",
    "Samtools",
    "Braker",
    "Agat",
    "Apptainer",
]
