import sys
from pathlib import Path

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `infrastructure.notifications`) works during pytest collection
# regardless of the directory pytest is invoked from.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
from tests.factories.notifications import (
    make_attributes,
    make_channel_options,
    make_module_settings,
    make_notification,
)


@pytest.fixture
def notification():
    return make_notification()


@pytest.fixture
def channel_options():
    return make_channel_options()


@pytest.fixture
def module_settings():
    return make_module_settings()


@pytest.fixture
def attributes():
    return make_attributes()
