"""Build snapshot models and host build-system interfaces."""

from .host import (
    Artifact,
    BuildHandle,
    BuildParameter,
    EndpointRegistry,
    LogSink,
    StaticBuild,
    StaticJob,
    StreamLogSink,
    load_build_descriptor,
)
from .models import BuildState, JobState, Phase, ScmState, TestState, UserData

__all__ = [
    # Snapshot models
    "Phase",
    "JobState",
    "BuildState",
    "ScmState",
    "TestState",
    "UserData",
    # Host interfaces
    "BuildHandle",
    "BuildParameter",
    "Artifact",
    "EndpointRegistry",
    "LogSink",
    "StreamLogSink",
    "StaticBuild",
    "StaticJob",
    "load_build_descriptor",
]
