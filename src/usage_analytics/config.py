"""Configuration for usage analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TelemetryConfig:
    """Reference transport configuration."""
    enabled: bool = True
    sink_type: str = "console"  # console | file | zmq
    sink_config: dict[str, Any] = field(default_factory=dict)

    # Batching
    batch_size: int = 1000
    flush_interval_seconds: float = 1.0

    # Queue
    max_queue_size: int = 10000
    overflow_policy: str = "drop"  # drop | raise


@dataclass
class ProfilingConfig:
    """Performance timeline (marks and measures for attached profilers)."""
    enabled: bool = False
    max_entries: int = 10000


@dataclass
class AnalyticsConfig:
    """Main configuration container."""
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    profiling: ProfilingConfig = field(default_factory=ProfilingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> AnalyticsConfig:
        """Create config from dictionary."""
        return cls(
            telemetry=TelemetryConfig(**data.get("telemetry", {})),
            profiling=ProfilingConfig(**data.get("profiling", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> AnalyticsConfig:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> AnalyticsConfig:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
