"""Resource files and configuration templates."""


def get_default_config() -> str:
    """Return default configuration YAML content."""
    return """# genomeannot Configuration File

# Input assembly and labels (genome and work_dir can be overridden by CLI arguments)
genome: ~
genome_name: ~          # prefix for BUSCO runs and the RepeatModeler database
species: ~              # AUGUSTUS species model label used by BRAKER3
threads: 16
work_dir: "."

# BUSCO completeness assessment (raw and masked assembly)
busco:
  lineage: ~            # e.g. eukaryota_odb10 (required)
  download_path: "busco_downloads"
  extra_args: ""

# RepeatModeler / RepeatMasker
repeat:
  engine: "ncbi"
  extra_library: ~      # curated TE library merged with the de novo one
  extra_args: ""

# Evidence for BRAKER3. Mode is chosen from what is present:
#   protein only -> EP, RNA-seq only -> ET, both -> ETP
# A BAM takes precedence over raw reads (no alignment stages run).
evidence:
  protein_db: ~
  rna_r1: ~
  rna_r2: ~             # requires rna_r1
  rna_bam: ~

# STAR alignment (only used when raw RNA-seq reads are given)
star:
  sa_index_nbases: 13
  extra_args: ""

# BRAKER3 container
braker:
  image: "braker3.sif"
  image_source: "docker://teambraker/braker3:latest"
  extra_args: "--AUGUSTUS_ab_initio"

# Per-stage output directories (relative to work_dir)
outputs:
  busco_raw: "01_busco_raw"
  repeat_modeler: "02_repeatmodeler"
  repeat_masker: "03_repeatmasker"
  busco_masked: "04_busco_masked"
  star: "05_star"
  braker: "06_braker"

# Execution environments: runner is conda, micromamba or none (tools on PATH)
environments:
  runner: "conda"
  annotation: "genome_annot"
  apptainer: "genome_annot"
  rnaseq: "rnaseq"

# Runtime settings
runtime:
  log_level: "WARNING"
  log_file: ~
  marker_dir: ".stamps"
  enable_progress: true
"""
