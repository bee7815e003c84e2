"""Tests for structlog setup."""

import warnings

import pytest

from merse.utils.logger import setup_logging


@pytest.mark.parametrize("is_production", [False, True])
def test_setup_logging_emits_no_deprecation_warnings(is_production):
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        logger = setup_logging(is_production)

    assert logger is not None
