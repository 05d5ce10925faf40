"""Apptainer image management."""

from pathlib import Path
from genomeannot.external.base import ExternalTool, Invocation


class Apptainer(ExternalTool):
    """Builds the BRAKER3 container image."""

    tool_name = "apptainer"
    environment = "apptainer"

    def build(self, image: Path, source: str) -> Invocation:
        """Build ``image`` from a registry ``source`` such as docker://teambraker/braker3:latest."""
        return self.invocation(
            [self.tool_name, "build", str(image), source],
            cwd=image.parent,
            description=f"Building container image {image.name} from {source}",
        )
