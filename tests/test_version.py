"""Tests for the package version metadata."""

from importlib import metadata

import pytest
from packaging.version import Version

import urlmetrics
from urlmetrics import _version as version_module


def test_version_is_semver_patch():
    version = Version(urlmetrics.__version__)

    assert len(version.release) == 3, (
        "urlmetrics.__version__ must contain exactly three release components"
    )


def test_changelog_fallback_matches_metadata_free_checkout(monkeypatch):
    def missing(name):
        raise metadata.PackageNotFoundError(name)

    monkeypatch.setattr(version_module.metadata, "version", missing)

    assert version_module._load_version() == "0.1.0"


def test_invalid_metadata_version_is_rejected(monkeypatch):
    monkeypatch.setattr(version_module.metadata, "version", lambda name: "1.2")

    with pytest.raises(RuntimeError, match="MAJOR.MINOR.PATCH"):
        version_module._load_version()
