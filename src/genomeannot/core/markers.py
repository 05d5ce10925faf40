"""Stage completion markers.

A marker records that a stage's actions all exited successfully. Markers are
never invalidated by input changes; only the clean operations remove them.
One orchestrator per work directory is assumed (no locking).
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from genomeannot.exceptions import PipelineError
from genomeannot.utils.logging import get_logger

MARKER_SUFFIX = ".done"


class MarkerStore(ABC):
    """Key-value store of completed stages, keyed by marker name."""

    @abstractmethod
    def is_satisfied(self, name: str) -> bool:
        """Return True if the stage completed successfully on a previous run."""

    @abstractmethod
    def mark_satisfied(self, name: str, **info: Any) -> None:
        """Record successful completion. Call only after the stage succeeded."""

    @abstractmethod
    def clear(self, name: Optional[str] = None) -> None:
        """Remove one marker, or all markers when ``name`` is None."""

    @abstractmethod
    def satisfied(self) -> list[str]:
        """Names of all satisfied markers, sorted."""


class InMemoryMarkerStore(MarkerStore):
    """Non-durable store for tests and plan previews."""

    def __init__(self, initial: Optional[list[str]] = None):
        self._done: Dict[str, Dict[str, Any]] = {name: {} for name in (initial or [])}

    def is_satisfied(self, name: str) -> bool:
        return name in self._done

    def mark_satisfied(self, name: str, **info: Any) -> None:
        self._done[name] = dict(info)

    def clear(self, name: Optional[str] = None) -> None:
        if name is None:
            self._done.clear()
        else:
            self._done.pop(name, None)

    def satisfied(self) -> list[str]:
        return sorted(self._done)


class FileMarkerStore(MarkerStore):
    """One ``<name>.done`` file per stage under a hidden marker directory.

    Files are written to a temporary name and atomically renamed, so a marker
    is either complete or absent.
    """

    def __init__(self, marker_dir: Path):
        self.marker_dir = Path(marker_dir)
        self.logger = get_logger("markers")

    def path_for(self, name: str) -> Path:
        return self.marker_dir / f"{name}{MARKER_SUFFIX}"

    def is_satisfied(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def mark_satisfied(self, name: str, **info: Any) -> None:
        marker = self.path_for(name)
        temp_file = marker.with_suffix(MARKER_SUFFIX + ".tmp")
        record = {"stage": name, "completed_at": datetime.now().isoformat()}
        record.update(info)
        try:
            self.marker_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w") as f:
                json.dump(record, f, indent=2, default=str)
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(marker)
        except OSError as e:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    pass
            raise PipelineError(f"Failed to write completion marker {marker}: {e}") from e
        self.logger.debug(f"Marker written: {marker}")

    def clear(self, name: Optional[str] = None) -> None:
        if name is not None:
            targets = [self.path_for(name)]
        elif self.marker_dir.is_dir():
            targets = sorted(self.marker_dir.glob(f"*{MARKER_SUFFIX}*"))
        else:
            targets = []
        for marker in targets:
            try:
                marker.unlink()
                self.logger.debug(f"Marker removed: {marker}")
            except FileNotFoundError:
                continue
            except OSError as e:
                raise PipelineError(f"Could not remove marker {marker}: {e}") from e

    def satisfied(self) -> list[str]:
        if not self.marker_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(MARKER_SUFFIX)]
            for p in self.marker_dir.glob(f"*{MARKER_SUFFIX}")
            if p.is_file()
        )

    def read(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the JSON record of a marker, if present and readable."""
        marker = self.path_for(name)
        if not marker.is_file():
            return None
        try:
            with open(marker, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Presence alone is the completion signal
            self.logger.debug(f"Unreadable marker record {marker}: {e}")
            return {}
