"""
Version information for the Megapot SDK.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION_NAME = "megapot-sdk"
DEFAULT_VERSION = "0.1.0"


def _pyproject_version() -> str:
    """Version declared in the source checkout's pyproject.toml"""
    path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
    try:
        with path.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return DEFAULT_VERSION


try:
    __version__ = importlib.metadata.version(DISTRIBUTION_NAME)
except importlib.metadata.PackageNotFoundError:
    __version__ = _pyproject_version()
