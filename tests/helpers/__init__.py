"""Test helper utilities for Build Notifier tests."""

from .builds import (
    RecordingProtocol,
    RecordingSink,
    StaticRegistry,
    load_fixture_config,
    make_build,
)

__all__ = [
    "RecordingProtocol",
    "RecordingSink",
    "StaticRegistry",
    "load_fixture_config",
    "make_build",
]
