"""
Configuration management for mmm-attribution.

Centralised configuration with YAML loading and sensible defaults.  The
engine itself receives its config explicitly; the module-level accessors
at the bottom only serve the CLI and the API as their default source.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section configs
# ---------------------------------------------------------------------------

class PrecisionConfig(BaseModel):
    """Presentation rounding and how the decomposer consumes it."""

    intercept_decimals: int = Field(default=2, ge=0)
    coefficient_decimals: int = Field(default=3, ge=0)
    r_squared_decimals: int = Field(default=4, ge=0)
    contribution_decimals: int = Field(default=2, ge=0)
    percent_decimals: int = Field(default=1, ge=0)
    decompose_with_rounded: bool = Field(
        default=True,
        description=(
            "Decompose with the rounded intercept/coefficients of the "
            "RegressionResult instead of the raw solver output."
        ),
    )


class SolverConfig(BaseModel):
    """Numerical settings for the OLS solver."""

    singular_epsilon: float = Field(default=1e-12, gt=0)


class StorageConfig(BaseModel):
    """Location of the SQLite database used by the CLI and the API."""

    database_path: Path = Field(default=Path("data/mmm.db"))


class SyntheticConfig(BaseModel):
    """Defaults for synthetic data generation."""

    n_weeks: int = Field(default=52, ge=1)
    start: str = Field(default="2023-01-02")
    seed: int = Field(default=42)


class ServerConfig(BaseModel):
    """API server settings."""

    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

class EngineConfig(BaseModel):
    """Root configuration for mmm-attribution."""

    project_name: str = Field(default="mmm-attribution")

    precision: PrecisionConfig = Field(default_factory=PrecisionConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    synthetic: SyntheticConfig = Field(default_factory=SyntheticConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "EngineConfig":
        """Load config from a YAML file."""
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Write config to a YAML file."""
        with open(Path(path), "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


# ---------------------------------------------------------------------------
# Global default (CLI / API only)
# ---------------------------------------------------------------------------

_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Return the global config instance (creates default if needed)."""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def set_config(config: EngineConfig) -> None:
    """Override the global config instance."""
    global _config
    _config = config


def load_config(path: Path | str | None = None) -> EngineConfig:
    """
    Load config from file, falling back to standard locations, then defaults.
    """
    global _config

    if path is not None:
        _config = EngineConfig.from_yaml(path)
    else:
        for candidate in [Path("config.yaml"), Path("config/config.yaml")]:
            if candidate.exists():
                _config = EngineConfig.from_yaml(candidate)
                break
        else:
            _config = EngineConfig()

    return _config
