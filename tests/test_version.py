"""
Tests for the version module of the Megapot SDK.
"""
import importlib
import re
from importlib import metadata as importlib_metadata
from unittest.mock import mock_open, patch

import pytest

from megapot_sdk import __version__


def _metadata_missing(name):
    raise importlib_metadata.PackageNotFoundError(name)


def _file_missing(*args, **kwargs):
    raise FileNotFoundError()


def _reload_version():
    import megapot_sdk.version as vmod
    return importlib.reload(vmod).__version__


def test_version_format():
    assert re.match(r'^\d+\.\d+\.\d+$', __version__)


@patch('importlib.metadata.version', return_value="2.3.4")
def test_installed_distribution_wins(mock_metadata_version):
    assert _reload_version() == "2.3.4"
    mock_metadata_version.assert_called_with("megapot-sdk")


@patch('importlib.metadata.version', side_effect=_metadata_missing)
@patch('pathlib.Path.open', new_callable=mock_open, read_data=b'[project]\nname = "megapot-sdk"\nversion = "1.2.3"\n')
def test_source_checkout_reads_pyproject(mock_open_file, mock_metadata_version):
    assert _reload_version() == "1.2.3"


@pytest.mark.parametrize("path_open", [
    _file_missing,
    mock_open(read_data=b'[project]\nname = "megapot-sdk"\n'),
    mock_open(read_data=b'not = [valid'),
])
def test_unreadable_pyproject_falls_back_to_default(monkeypatch, path_open):
    monkeypatch.setattr(importlib_metadata, 'version', _metadata_missing)
    monkeypatch.setattr('pathlib.Path.open', path_open)

    assert _reload_version() == "0.1.0"
