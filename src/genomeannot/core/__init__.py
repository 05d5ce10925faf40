"""Core orchestration: evidence selection, path resolution, markers, executor.

The executor lives in ``genomeannot.core.pipeline``; it is not re-exported here
so the external tool wrappers can import the lightweight types without a cycle.
"""

from genomeannot.core.evidence import EvidenceConfiguration, ExecutionMode, select_mode

__all__ = ["EvidenceConfiguration", "ExecutionMode", "select_mode"]
