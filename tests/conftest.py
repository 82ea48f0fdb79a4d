import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from encoding_aware.config import Settings
from encoding_aware.registry import EncodingRegistry


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "debug": False,
        "external_encoding": None,
        "internal_encoding": None,
        "default_internal_encoding": None,
        "default_external_encoding": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(name="make_settings")
def make_settings_fixture():
    return make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def registry(settings):
    return EncodingRegistry(settings=settings)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session
