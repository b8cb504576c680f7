"""Controller configuration."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from node_labeler.exceptions import ConfigurationError

# Labels a node's region is read from, in order
DEFAULT_REGION_LABELS = [
    "failure-domain.beta.kubernetes.io/region",
    "topology.kubernetes.io/region",
]


class LabelerConfig(BaseModel):
    """Node labeler configuration."""

    kubeconfig: str | None = Field(default_factory=lambda: os.environ.get("KUBECONFIG") or None)
    in_cluster: bool = False
    region_labels: list[str] = Field(default_factory=lambda: list(DEFAULT_REGION_LABELS))
    # Kept below the default pod termination grace period so SIGTERM is honored
    watch_timeout_seconds: int = 25
    dry_run: bool = False

    @field_validator("region_labels")
    @classmethod
    def validate_region_labels(cls, v: list[str]) -> list[str]:
        """Validate at least one region label is configured."""
        if not v:
            raise ValueError("region_labels cannot be empty")
        return v

    @field_validator("watch_timeout_seconds")
    @classmethod
    def validate_watch_timeout(cls, v: int) -> int:
        """Validate the watch timeout is positive."""
        if v <= 0:
            raise ValueError(f"watch_timeout_seconds must be positive, got {v}")
        return v

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str | Path) -> "LabelerConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                f"Expected location: {path.absolute()}",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file {path}", str(e)) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid configuration file {path}", "The top level must be a mapping"
            )

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}", str(e)) from e
