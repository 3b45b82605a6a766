"""Shared fixtures for Build Notifier tests."""

import pytest

from build_notifier.logging.context import clear_log_context
from tests.helpers import RecordingProtocol, RecordingSink, make_build


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def sink():
    """Log sink recording build console lines."""
    return RecordingSink()


@pytest.fixture
def protocol():
    """Transport recording every send."""
    return RecordingProtocol()


@pytest.fixture
def build():
    """A started build of job 'app' in folder 'team'."""
    return make_build(
        name="app",
        full_display_name="team » app",
        number=42,
        environment={"BRANCH": "main"},
        console_log="line 1\nline 2\nline 3\nline 4\n",
    )
