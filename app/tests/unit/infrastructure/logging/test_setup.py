"""Unit tests for logger setup helpers."""

import pytest

from infrastructure.logging import configure_logging, get_module_logger


@pytest.mark.unit
def test_configure_logging_returns_logger_in_tests():
    configured = configure_logging()

    assert hasattr(configured, "info")


@pytest.mark.unit
def test_get_module_logger_binds_calling_module():
    module_logger = get_module_logger()

    context = module_logger._context  # pylint: disable=protected-access
    assert context["component"] == "test_setup"
    assert context["module_path"].endswith("test_setup")
