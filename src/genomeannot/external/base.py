"""Base classes for external tool execution."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from genomeannot.config import EnvironmentConfig
from genomeannot.exceptions import MissingEnvironmentError, ToolExecutionError
from genomeannot.utils.logging import get_logger, LogTemplates

ENVIRONMENT_HINTS = {
    "conda": "Install conda and create the environment, e.g. `conda create -n {env} -c bioconda {tool}`",
    "micromamba": "Install micromamba and create the environment, e.g. `micromamba create -n {env} -c bioconda {tool}`",
    "none": "Install {tool} and make sure it is on PATH (or set environments.runner)",
    "apptainer": "Install Apptainer in the '{env}' environment",
}

# Exit status of a shell or runner that could not find the command
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class Invocation:
    """A single external-process request.

    ``environment`` names the logical environment (``annotation``, ``rnaseq``
    or ``apptainer``). When ``image`` is set the argv runs inside
    ``apptainer exec`` with exactly the listed ``binds`` visible.
    """

    tool: str
    argv: tuple[str, ...]
    environment: Optional[str] = None
    cwd: Optional[Path] = None
    log_file: Optional[Path] = None
    append_log: bool = False
    image: Optional[Path] = None
    binds: tuple[tuple[Path, Path], ...] = ()
    description: str = ""
    requires_file: Optional[Path] = None


class ExternalTool:
    """Base class for external tool command builders."""

    tool_name: str = ""
    environment: Optional[str] = "annotation"

    def __init__(
        self,
        threads: int = 1,
        extra_args: str = "",
        logger: Optional[logging.Logger] = None,
    ):
        self.threads = threads
        self.extra_args = self.split_args(extra_args)
        self.logger = logger or get_logger(f"external.{self.tool_name}")

    @staticmethod
    def split_args(extra: Optional[str]) -> list[str]:
        """Split a pass-through argument string the way a shell would."""
        return shlex.split(extra) if extra else []

    def invocation(self, argv: Sequence[str], **kwargs) -> Invocation:
        kwargs.setdefault("environment", self.environment)
        return Invocation(tool=self.tool_name, argv=tuple(str(a) for a in argv), **kwargs)


class ToolInvoker:
    """Runs invocations through the configured environment runner.

    Output (stdout and stderr merged) is streamed into the invocation's log
    file and to the DEBUG logger. One attempt per call; no timeout.
    """

    def __init__(
        self,
        environments: Optional[EnvironmentConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.environments = environments or EnvironmentConfig()
        self.logger = logger or get_logger("invoker")

    def runner_prefix(self, environment: Optional[str]) -> list[str]:
        """Command prefix that executes inside the named environment."""
        runner = self.environments.runner
        if runner == "none" or environment is None:
            return []
        env_name = getattr(self.environments, environment)
        if runner == "conda":
            return ["conda", "run", "--no-capture-output", "-n", env_name]
        if runner == "micromamba":
            return ["micromamba", "run", "-n", env_name]
        raise ValueError(f"Unknown environment runner: {runner}")

    def command_for(self, invocation: Invocation) -> list[str]:
        """Full argv, including runner prefix and container wrapping."""
        cmd = self.runner_prefix(invocation.environment)
        if invocation.image is not None:
            cmd += ["apptainer", "exec", "--no-home"]
            for host, sandbox in invocation.binds:
                cmd += ["--bind", f"{host}:{sandbox}"]
            cmd.append(str(invocation.image))
        cmd += list(invocation.argv)
        return cmd

    def render(self, invocation: Invocation) -> str:
        return shlex.join(self.command_for(invocation))

    def _missing(self, stage: str, invocation: Invocation, executable: str) -> MissingEnvironmentError:
        env_key = invocation.environment or ""
        env_name = getattr(self.environments, env_key, env_key) if env_key else ""
        runner = self.environments.runner
        if executable in ("conda", "micromamba", "apptainer"):
            hint_key = executable
        elif runner in ENVIRONMENT_HINTS and env_key:
            hint_key = runner
        else:
            hint_key = "none"
        hint = ENVIRONMENT_HINTS[hint_key].format(env=env_name, tool=invocation.tool)
        return MissingEnvironmentError(
            f"Executable '{executable}' not found for stage '{stage}'",
            stage=stage,
            executable=executable,
            hint=hint,
        )

    def invoke(self, invocation: Invocation, stage: str) -> int:
        """Run one invocation to completion.

        Returns:
            0 on success (also when skipped because ``requires_file`` is absent).

        Raises:
            MissingEnvironmentError: the executable could not be found/started.
            ToolExecutionError: the tool exited with a non-zero status.
        """
        if invocation.requires_file is not None and not invocation.requires_file.exists():
            self.logger.warning(
                f"[{stage}] {invocation.requires_file} not found; skipping {invocation.tool}"
                + (f" - check {invocation.log_file}" if invocation.log_file else "")
            )
            return 0

        cmd = self.command_for(invocation)
        executable = cmd[0]
        if shutil.which(executable) is None:
            raise self._missing(stage, invocation, executable)

        if invocation.cwd is not None:
            invocation.cwd.mkdir(parents=True, exist_ok=True)
        if invocation.log_file is not None:
            invocation.log_file.parent.mkdir(parents=True, exist_ok=True)

        self.logger.info(
            LogTemplates.TOOL_START.format(
                stage=stage, description=invocation.description or invocation.tool
            )
        )
        cmd_str = shlex.join(cmd)
        self.logger.debug(f"Running: {cmd_str}")

        mode = "a" if invocation.append_log else "w"
        log_handle = open(invocation.log_file, mode) if invocation.log_file else None
        try:
            if log_handle is not None:
                log_handle.write(f"$ {cmd_str}\n")
                log_handle.flush()
            try:
                proc = subprocess.Popen(
                    cmd,
                    cwd=invocation.cwd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                    bufsize=1,
                )
            except (FileNotFoundError, PermissionError) as e:
                raise self._missing(stage, invocation, executable) from e

            try:
                assert proc.stdout is not None
                for line in proc.stdout:
                    if log_handle is not None:
                        log_handle.write(line)
                    self.logger.debug(f"[{invocation.tool}] {line.rstrip()}")
                returncode = proc.wait()
            except BaseException:
                # Interrupted: stop the child before propagating
                proc.terminate()
                proc.wait()
                raise
            finally:
                if proc.stdout is not None:
                    proc.stdout.close()
        finally:
            if log_handle is not None:
                log_handle.close()

        prefix = self.runner_prefix(invocation.environment)
        if returncode == COMMAND_NOT_FOUND and prefix:
            # The runner started but the command is absent from its environment
            raise self._missing(stage, invocation, cmd[len(prefix)])
        if returncode != 0:
            self.logger.error(
                LogTemplates.TOOL_FAILURE.format(
                    stage=stage,
                    tool=invocation.tool,
                    exit_code=returncode,
                    log_file=invocation.log_file or "-",
                )
            )
            raise ToolExecutionError(
                f"{invocation.tool} failed in stage '{stage}' with exit code {returncode}"
                + (f" (log: {invocation.log_file})" if invocation.log_file else ""),
                stage=stage,
                exit_code=returncode,
                command=cmd,
                log_file=invocation.log_file,
            )
        return 0
