"""genomeannot subcommands."""
