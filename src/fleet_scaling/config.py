"""Scaling configuration model."""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import yaml

from fleet_scaling.exceptions import ConfigError


@dataclass
class ScalingConfig:
    """Configuration for the fleet scaling control loop."""

    enabled: bool = False
    target_duration: int = 60
    average_job_duration: float = 60.0
    poll_interval: int = 10
    fleet_key: str = "fleet-scaling:workers"
    worker_script: str = "worker.py"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate scaling configuration."""
        if self.target_duration < 1:
            raise ConfigError("target_duration must be >= 1")
        if self.average_job_duration <= 0:
            raise ConfigError("average_job_duration must be > 0")
        if self.poll_interval < 1:
            raise ConfigError("poll_interval must be >= 1")
        if not self.fleet_key:
            raise ConfigError("fleet_key must not be empty")

    @property
    def target_timedelta(self) -> timedelta:
        return timedelta(seconds=self.target_duration)

    @property
    def average_job_timedelta(self) -> timedelta:
        return timedelta(seconds=self.average_job_duration)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ScalingConfig":
        """Create ScalingConfig from dictionary.

        Args:
            data: Dictionary with scaling configuration, or None/empty

        Returns:
            ScalingConfig instance
        """
        if not data:
            return cls()

        # Filter to only known fields
        known_fields = {
            "enabled",
            "target_duration",
            "average_job_duration",
            "poll_interval",
            "fleet_key",
            "worker_script",
        }
        filtered = {k: v for k, v in data.items() if k in known_fields}
        return cls(**filtered)

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "enabled": self.enabled,
            "target_duration": self.target_duration,
            "average_job_duration": self.average_job_duration,
            "poll_interval": self.poll_interval,
            "fleet_key": self.fleet_key,
            "worker_script": self.worker_script,
        }


@dataclass
class RedisSettings:
    """Connection settings for the queue the fleet consumes."""

    url: str = "redis://localhost:6379"
    stream: str = "feature-requests"
    consumer_group: str = "orchestrator-workers"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "RedisSettings":
        data = data or {}
        return cls(
            url=data.get("url", cls.url),
            stream=data.get("stream", cls.stream),
            consumer_group=data.get("consumer_group", cls.consumer_group),
        )


def load_config(config_path: str = "config.yaml") -> dict:
    """Load the full YAML configuration file.

    Args:
        config_path: Path to the YAML configuration file.
                     If not found, tries the repository root.

    Returns:
        Parsed configuration, or an empty dict if no file was found.
    """
    paths_to_try = [config_path]

    # Try relative to the repository root (src/fleet_scaling -> repo)
    module_dir = os.path.dirname(os.path.abspath(__file__))
    repo_root = os.path.dirname(os.path.dirname(module_dir))
    paths_to_try.append(os.path.join(repo_root, config_path))

    for path in paths_to_try:
        if os.path.exists(path):
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            return data
    return {}


def load_scaling_config(config_path: str = "config.yaml") -> ScalingConfig:
    """Load the ``worker_scaling`` section as a ScalingConfig.

    Returns default config if the file or section is not found.
    """
    return ScalingConfig.from_dict(load_config(config_path).get("worker_scaling", {}))


def load_redis_settings(config_path: str = "config.yaml") -> RedisSettings:
    """Load the ``redis_streams`` section as RedisSettings."""
    return RedisSettings.from_dict(load_config(config_path).get("redis_streams", {}))
