"""Configuration management for genomeannot."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
from genomeannot.exceptions import ConfigurationError


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    # Hidden directory (under work_dir) holding one <stage>.done file per stage
    marker_dir: Path = Path(".stamps")
    enable_progress: bool = True


@dataclass
class BuscoConfig:
    """BUSCO completeness assessment settings."""

    lineage: Optional[str] = None
    download_path: Path = Path("busco_downloads")
    extra_args: str = ""


@dataclass
class RepeatConfig:
    """RepeatModeler / RepeatMasker settings."""

    engine: str = "ncbi"
    # Curated TE library merged with the de novo library (optional)
    extra_library: Optional[Path] = None
    extra_args: str = ""


@dataclass
class EvidenceConfig:
    """Optional evidence for BRAKER3; drives EP / ET / ETP selection."""

    protein_db: Optional[Path] = None
    rna_r1: Optional[Path] = None
    rna_r2: Optional[Path] = None
    rna_bam: Optional[Path] = None


@dataclass
class BrakerConfig:
    """BRAKER3 container settings."""

    image: Path = Path("braker3.sif")
    image_source: str = "docker://teambraker/braker3:latest"
    extra_args: str = "--AUGUSTUS_ab_initio"


@dataclass
class StarConfig:
    """STAR aligner settings."""

    sa_index_nbases: int = 13
    extra_args: str = ""


@dataclass
class OutputDirs:
    """Per-stage output directory names (relative to work_dir)."""

    busco_raw: Path = Path("01_busco_raw")
    repeat_modeler: Path = Path("02_repeatmodeler")
    repeat_masker: Path = Path("03_repeatmasker")
    busco_masked: Path = Path("04_busco_masked")
    star: Path = Path("05_star")
    braker: Path = Path("06_braker")


@dataclass
class EnvironmentConfig:
    """Execution environments the external tools live in.

    ``runner`` is one of ``conda``, ``micromamba`` or ``none`` (tools on PATH).
    """

    runner: str = "conda"
    annotation: str = "genome_annot"
    apptainer: str = "genome_annot"
    rnaseq: str = "rnaseq"


RUNNERS = ("conda", "micromamba", "none")

_PATH_KEYS = {
    "genome",
    "work_dir",
    "log_file",
    "marker_dir",
    "download_path",
    "extra_library",
    "protein_db",
    "rna_r1",
    "rna_r2",
    "rna_bam",
    "image",
}
_PATH_KEYS |= {f.name for f in fields(OutputDirs)}


@dataclass
class Config:
    """Main configuration class."""

    # Required parameters (set via config file or CLI)
    genome: Optional[Path] = None
    genome_name: Optional[str] = None
    species: Optional[str] = None
    threads: int = 16
    work_dir: Path = Path(".")

    # Sub-configurations
    busco: BuscoConfig = field(default_factory=BuscoConfig)
    repeat: RepeatConfig = field(default_factory=RepeatConfig)
    evidence: EvidenceConfig = field(default_factory=EvidenceConfig)
    star: StarConfig = field(default_factory=StarConfig)
    braker: BrakerConfig = field(default_factory=BrakerConfig)
    outputs: OutputDirs = field(default_factory=OutputDirs)
    environments: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    def validate(self) -> None:
        """Validate required settings. Does not touch the filesystem."""
        if not self.genome:
            raise ConfigurationError("Input assembly (genome) is required")
        if not self.genome_name:
            raise ConfigurationError("Organism label (genome_name) is required")
        if not self.species:
            raise ConfigurationError("Species model label (species) is required")
        if not self.busco.lineage:
            raise ConfigurationError("BUSCO lineage (busco.lineage) is required")
        if not isinstance(self.threads, int) or isinstance(self.threads, bool) or self.threads < 1:
            raise ConfigurationError(f"Threads must be an integer >= 1, got {self.threads!r}")
        if self.environments.runner not in RUNNERS:
            raise ConfigurationError(
                f"Unknown environments.runner {self.environments.runner!r}; "
                f"expected one of: {', '.join(RUNNERS)}"
            )
        if self.evidence.rna_r2 and not self.evidence.rna_r1:
            raise ConfigurationError("evidence.rna_r2 is set but evidence.rna_r1 is not")

        if not self.runtime.marker_dir:
            raise ConfigurationError("runtime.marker_dir must not be empty")
        marker_dir = Path(self.runtime.marker_dir)
        if marker_dir.is_absolute() or ".." in marker_dir.parts or str(marker_dir) in {"", "."}:
            raise ConfigurationError(
                "Invalid runtime.marker_dir: must be a subdirectory name inside work_dir"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


def _coerce(key: str, value: Any) -> Any:
    if key in _PATH_KEYS and value not in (None, ""):
        return Path(value)
    if value == "":
        return None if key in _PATH_KEYS else value
    return value


def _apply_section(target: Any, section: str, values: Dict[str, Any]) -> None:
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{section}' must be a mapping")
    known = {f.name for f in fields(target)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(
            f"Unsupported option(s) in section '{section}': {', '.join(unknown)}"
        )
    for key, value in values.items():
        setattr(target, key, _coerce(key, value))


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a Config from a parsed mapping (YAML document)."""
    cfg = Config()
    sections = {f.name for f in fields(Config) if f.name not in {
        "genome", "genome_name", "species", "threads", "work_dir",
    }}

    for key, value in data.items():
        if key in sections:
            if value is None:
                continue
            _apply_section(getattr(cfg, key), key, value)
        elif key in {"genome", "genome_name", "species", "threads", "work_dir"}:
            if value is None:
                continue
            setattr(cfg, key, _coerce(key, value))
        else:
            raise ConfigurationError(f"Unsupported config option: {key}")

    if cfg.work_dir is None:
        cfg.work_dir = Path(".")
    return cfg


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
