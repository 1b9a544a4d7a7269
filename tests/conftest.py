"""Pytest configuration and fixtures for NEARLINK tests."""

import logging
import os

import pytest

from nearlink.observability.logging import HANDLER_NAME


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear NEARLINK-related environment variables before each test."""
    for key in list(os.environ.keys()):
        if key.startswith("NEARLINK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def remove_log_handler():
    """Drop the root handler configure_logging installs during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
