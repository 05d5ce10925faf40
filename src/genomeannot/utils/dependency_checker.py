"""Dependency checker for genomeannot.

Pre-flight checks for the environment runner, container runtime and, when
tools are expected directly on PATH, every external tool.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from packaging import version

from genomeannot.config import EnvironmentConfig
from genomeannot.utils.logging import get_logger


@dataclass
class Tool:
    """Tool dependency definition."""

    name: str
    required: bool
    purpose: str
    install_hint: str
    min_version: Optional[str] = None


RUNNER_TOOLS = {
    "conda": Tool(
        name="conda",
        required=True,
        purpose="Runs tools inside named environments",
        install_hint="https://docs.conda.io/en/latest/miniconda.html",
    ),
    "micromamba": Tool(
        name="micromamba",
        required=True,
        purpose="Runs tools inside named environments",
        install_hint="https://mamba.readthedocs.io/en/latest/installation/micromamba-installation.html",
    ),
}

PATH_TOOLS = [
    Tool("busco", True, "Assembly completeness", "conda install -c bioconda busco", "5.0"),
    Tool("BuildDatabase", True, "RepeatModeler database", "conda install -c bioconda repeatmodeler"),
    Tool("RepeatModeler", True, "De novo repeat library", "conda install -c bioconda repeatmodeler"),
    Tool("RepeatMasker", True, "Soft-masking", "conda install -c bioconda repeatmasker"),
    Tool("apptainer", True, "Runs the BRAKER3 image", "conda install -c conda-forge apptainer", "1.0"),
]

ALIGNMENT_TOOLS = [
    Tool("STAR", True, "RNA-seq alignment", "conda install -c bioconda star", "2.7"),
    Tool("samtools", True, "BAM indexing", "conda install -c bioconda samtools", "1.10"),
]


def get_tool_version(tool_name: str, version_arg: str = "--version") -> Optional[str]:
    """Get version string from a tool, or None if it cannot be determined."""
    try:
        result = subprocess.run(
            [tool_name, version_arg],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    match = re.search(r"(\d+\.\d+(?:\.\d+)*)", result.stdout + result.stderr)
    return match.group(1) if match else None


def compare_versions(current: str, minimum: str) -> bool:
    """Return True if ``current`` >= ``minimum`` (unparseable versions pass)."""
    try:
        return version.parse(current) >= version.parse(minimum)
    except version.InvalidVersion:
        return True


class DependencyChecker:
    """Check and report on tool dependencies."""

    def __init__(
        self,
        environments: Optional[EnvironmentConfig] = None,
        needs_alignment: bool = True,
        image: Optional[Path] = None,
        logger=None,
    ):
        self.environments = environments or EnvironmentConfig()
        self.needs_alignment = needs_alignment
        self.image = image
        self.logger = logger or get_logger("dependency_checker")
        self.found_tools: List[str] = []
        self.missing_required: List[Tool] = []
        self.version_warnings: List[str] = []
        self.notes: List[str] = []

    def tools(self) -> List[Tool]:
        runner = self.environments.runner
        if runner in RUNNER_TOOLS:
            return [RUNNER_TOOLS[runner]]
        tools = list(PATH_TOOLS)
        if self.needs_alignment:
            tools += ALIGNMENT_TOOLS
        return tools

    def check_all(self) -> bool:
        """Check all dependencies. Returns True if all required tools are available."""
        self.logger.info("Checking dependencies...")
        for tool in self.tools():
            if shutil.which(tool.name) is None:
                if tool.required:
                    self.missing_required.append(tool)
                    self.logger.error(f"✗ {tool.name} not found (REQUIRED)")
                continue
            self.found_tools.append(tool.name)
            if tool.min_version:
                current = get_tool_version(tool.name)
                if current and not compare_versions(current, tool.min_version):
                    warning = f"{tool.name}: version {current} < recommended {tool.min_version}"
                    self.version_warnings.append(warning)
                    self.logger.warning(f"⚠ {warning}")
            self.logger.debug(f"✓ {tool.name} found")

        if self.image is not None and not self.image.is_file():
            self.notes.append(
                f"Container image {self.image} not found; run `genomeannot build-image`"
            )
        return not self.missing_required

    def report_lines(self) -> List[str]:
        lines = []
        if self.found_tools:
            lines.append("✓ Found tools: " + ", ".join(sorted(self.found_tools)))
        for warning in self.version_warnings:
            lines.append(f"⚠ {warning}")
        for note in self.notes:
            lines.append(f"⚠ {note}")
        for tool in self.missing_required:
            lines.append(f"✗ Missing {tool.name} ({tool.purpose}); install: {tool.install_hint}")
        return lines
