"""Console formatting for pipeline runs."""

from __future__ import annotations

import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from genomeannot.__version__ import __version__

BULLET = "·"


class ConsoleFormatter:
    """Console output formatter for genomeannot."""

    def __init__(self, width: int = 60):
        self.width = width
        self.start_time: Optional[float] = None

    def header(self) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        title = f"genomeannot  {BULLET}  {timestamp}  {BULLET}  v{__version__}"
        if len(title) < self.width:
            title = " " * ((self.width - len(title)) // 2) + title
        return "\n".join(["=" * self.width, title, "-" * self.width])

    def separator(self, char: str = "-") -> str:
        return char * self.width

    def format_line(self, label: str, value: Any, label_width: int = 14) -> str:
        return f"{BULLET} {label:<{label_width}} : {value}"

    def _format_path(self, path: Path) -> str:
        """Show paths relative to the current directory when possible."""
        try:
            return str(Path(path).relative_to(Path.cwd())) or "."
        except ValueError:
            return str(path)

    def format_config(self, config: Dict[str, Any]) -> str:
        lines = []
        for label, value in config.items():
            if isinstance(value, Path):
                value = self._format_path(value)
            lines.append(self.format_line(label, value))
        return "\n".join(lines)

    def format_plan(self, records: Iterable[Any], show_commands: bool = True) -> str:
        """List stages of an ExecutionResult with their status and commands."""
        lines = []
        for i, record in enumerate(records, 1):
            marker = "✓" if record.status == "skipped" else "○"
            note = " (already completed)" if record.status == "skipped" else ""
            lines.append(f"{marker} {i}. {record.name}{note}")
            if show_commands:
                for command in record.commands:
                    lines.append(f"      $ {command}")
        return "\n".join(lines)

    def format_outputs(self, outputs: Dict[str, Optional[Path]]) -> str:
        lines = ["Key outputs:"]
        for label, path in outputs.items():
            if path is not None:
                lines.append(f"  {label:<20}: {self._format_path(path)}")
        return "\n".join(lines)

    def start_message(self) -> str:
        self.start_time = time.time()
        return self.format_line("Status", "Starting pipeline...")

    def success_message(self, mode: str) -> str:
        lines = [f"{BULLET} Pipeline complete! (BRAKER3 mode: {mode})"]
        if self.start_time:
            elapsed = time.time() - self.start_time
            minutes, seconds = int(elapsed // 60), int(elapsed % 60)
            time_str = f"{minutes}m {seconds}s" if minutes else f"{seconds}s"
            lines.append(f"{BULLET} Time elapsed: {time_str}")
        return "\n".join(lines)

    def error_message(self, error: str) -> str:
        return f"{BULLET} Pipeline failed: {error}"


def print_formatted(message: str, file=None) -> None:
    """Print formatted message to console."""
    print(message, file=file or sys.stdout, flush=True)
