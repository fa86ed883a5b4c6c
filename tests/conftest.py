"""Shared test fixtures and configuration."""
import pytest

from catalog.seed import default_catalog
from estimator.composer import start_new_estimate
from estimator.session import EstimateSession
from estimator.settings import AppSettings
from estimator.store import EstimateStore


@pytest.fixture
def catalog():
    """Seed template catalog."""
    return default_catalog()


@pytest.fixture
def estimate(catalog):
    """New estimate with one default 3-ton AC + Furnace system."""
    return start_new_estimate(catalog)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return EstimateStore(data_dir)


@pytest.fixture
def session(store, data_dir):
    return EstimateSession(store, AppSettings(data_dir=data_dir))
