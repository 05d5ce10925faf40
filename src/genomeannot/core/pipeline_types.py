"""Shared pipeline types.

This module intentionally contains only lightweight dataclasses so it can be
imported by stage definitions without pulling in the executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

from genomeannot.core.evidence import EvidenceConfiguration

if TYPE_CHECKING:
    from genomeannot.core.resolver import ResolvedSettings
    from genomeannot.external.base import Invocation


def always(_evidence: EvidenceConfiguration) -> bool:
    return True


@dataclass(frozen=True)
class LocalTask:
    """An in-process file operation that is part of a stage's action."""

    description: str
    func: Callable[[], None]

    def render(self) -> str:
        return f"(local) {self.description}"


Action = Union["Invocation", LocalTask]


@dataclass(frozen=True)
class Stage:
    """One pipeline step: predecessors, applicability and its action.

    ``build`` turns resolved settings into the ordered actions of the stage.
    ``requires`` lists files produced upstream that must exist before it runs.
    """

    name: str
    description: str
    depends_on: tuple[str, ...] = ()
    build: Optional[Callable[["ResolvedSettings"], List[Action]]] = None
    applicable: Callable[[EvidenceConfiguration], bool] = always
    requires: Optional[Callable[["ResolvedSettings"], List[Path]]] = None
    output_dir: Optional[str] = None
    marker: Optional[str] = None

    @property
    def marker_name(self) -> str:
        return self.marker or self.name

    def actions(self, settings: "ResolvedSettings") -> List[Action]:
        return list(self.build(settings)) if self.build else []

    def required_files(self, settings: "ResolvedSettings") -> List[Path]:
        return list(self.requires(settings)) if self.requires else []


@dataclass
class StageRecord:
    """What happened to one stage during a run (or would happen, in a dry run)."""

    name: str
    status: str = "pending"  # pending, skipped, completed, failed, planned
    duration: Optional[float] = None
    log_file: Optional[Path] = None
    commands: List[str] = field(default_factory=list)
    error_message: Optional[str] = None


@dataclass
class ExecutionResult:
    """Outcome of ``Pipeline.run``."""

    target: str
    mode: str
    planned: List[str] = field(default_factory=list)
    executed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    records: Dict[str, StageRecord] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return all(r.status != "failed" for r in self.records.values())

    def summary(self) -> Dict[str, Any]:
        return {
            name: {
                "status": record.status,
                "duration": record.duration,
                "log_file": str(record.log_file) if record.log_file else None,
                "error": record.error_message,
            }
            for name, record in self.records.items()
        }
