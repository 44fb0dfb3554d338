"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import (
    AnnualIncomeConfig,
    BusinessRules,
    CalculationConfig,
    ConfigurationError,
    EngineConfiguration,
    EngineMeta,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
CONFIG_FILE = CONFIG_DIRECTORY / "engine.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_engine_configuration() -> EngineConfiguration:
    """Load and cache the calculation engine configuration from disk."""

    if not CONFIG_FILE.exists():
        raise FileNotFoundError(f"Engine configuration missing: {CONFIG_FILE.name}")

    raw_config = _load_yaml(CONFIG_FILE)

    try:
        return EngineConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Engine configuration validation failed: {error}") from error


__all__ = [
    "AnnualIncomeConfig",
    "BusinessRules",
    "CONFIG_DIRECTORY",
    "CONFIG_FILE",
    "CalculationConfig",
    "ConfigurationError",
    "EngineConfiguration",
    "EngineMeta",
    "load_engine_configuration",
]
