# test/conftest.py
import pytest

from streamdatum.core import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # Settings are cached per process; tests that patch the environment need a reload.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
