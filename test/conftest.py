"""
Shared pytest configuration and fixtures for the hotprops tests.
"""

import pytest

from hotprops.config.descriptor import ConfigDescriptor, HotReload
from hotprops.core.enums import HotReloadType, TimeUnit


@pytest.fixture
def write_source(tmp_path):
    """Write a source file under a temporary directory and return its path."""
    def _write(name, text):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sync_hot_reload():
    """Sync hot reload that re-checks every 10 milliseconds."""
    return HotReload(value=10, unit=TimeUnit.MILLISECONDS, type=HotReloadType.SYNC)


@pytest.fixture
def file_descriptor(write_source):
    """Descriptor with one file source holding {b: 20, c: 30}."""
    path = write_source("app.properties", "b=20\nc=30\n")
    return ConfigDescriptor(name="app", sources=[f"file:{path}"])


def pytest_collection_modifyitems(items):
    """Tests not marked as integration are unit tests."""
    for item in items:
        if item.get_closest_marker("integration") is None:
            item.add_marker(pytest.mark.unit)
