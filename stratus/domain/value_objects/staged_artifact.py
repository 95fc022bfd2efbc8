from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StagedArtifact:
    """
    Value Object for one temporary config file written for a single deploy.
    """
    path: Path

    def __post_init__(self):
        if not self.path.name:
            raise ValueError("Staged artifact path cannot be empty")

    def __str__(self):
        return str(self.path)
