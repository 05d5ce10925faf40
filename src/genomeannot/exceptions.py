"""Custom exceptions for genomeannot."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class GenomeAnnotError(Exception):
    """Base exception for all genomeannot errors."""

    pass


class ConfigurationError(GenomeAnnotError):
    """Raised when configuration is invalid, missing or contradictory."""

    pass


class PipelineError(GenomeAnnotError):
    """Raised when the orchestrator itself cannot proceed (e.g. marker I/O)."""

    pass


class StageError(GenomeAnnotError):
    """Base class for failures attributed to a single stage."""

    def __init__(self, message: str = "", stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class DependencyError(StageError):
    """Raised when a stage is about to run but a predecessor is not satisfied."""

    pass


class MissingEnvironmentError(StageError):
    """Raised when an executable or execution environment is absent."""

    def __init__(
        self,
        message: str = "",
        stage: Optional[str] = None,
        executable: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        """Initialize MissingEnvironmentError.

        Args:
            message: Error message
            stage: Stage whose action could not start
            executable: Executable (or image) that was not found
            hint: Remediation hint shown to the operator
        """
        if hint:
            message = f"{message}\n  Hint: {hint}"
        super().__init__(message, stage=stage)
        self.executable = executable
        self.hint = hint


class ToolExecutionError(StageError):
    """Raised when an external tool ran and exited with a failure status."""

    def __init__(
        self,
        message: str = "",
        stage: Optional[str] = None,
        exit_code: Optional[int] = None,
        command=None,
        log_file: Optional[Path] = None,
    ):
        """Initialize ToolExecutionError with optional command details.

        Args:
            message: Error message
            stage: Stage the failing tool belongs to
            exit_code: Exit code from the command
            command: Command that was executed (list of strings)
            log_file: Log file holding the captured tool output
        """
        super().__init__(message, stage=stage)
        self.exit_code = exit_code
        self.command = command
        self.log_file = log_file
