"""Version stamps exposed by the API and reported with every calculation."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

from uncertainincome.backend.config.engine_config import load_engine_configuration

PACKAGE_NAME: Final = "uncertain-income"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@dataclass(frozen=True)
class VersionInfo:
    """Distribution version plus the engine's API and logic stamps."""

    version: str
    api_version: str
    logic_version: str

    def as_dict(self) -> dict[str, str]:
        return {
            "version": self.version,
            "api_version": self.api_version,
            "logic_version": self.logic_version,
        }


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, reading ``pyproject.toml`` for source checkouts."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _read_version_from_pyproject(PYPROJECT_PATH)


def _read_version_from_pyproject(path: Path) -> str:
    if not path.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    with path.open("rb") as handle:
        data = tomllib.load(handle)

    version = data.get("project", {}).get("version")
    if not version:
        raise RuntimeError("Unable to determine project version from pyproject.toml")
    return str(version)


def get_version_info() -> VersionInfo:
    """Combine the distribution version with the configured engine stamps."""

    meta = load_engine_configuration().meta
    return VersionInfo(
        version=get_project_version(),
        api_version=meta.api_version,
        logic_version=meta.logic_version,
    )


__all__ = ["PACKAGE_NAME", "VersionInfo", "get_project_version", "get_version_info"]
