"""Snapshot models describing a build at notification time.

This module defines the immutable data sent to endpoints:
- Phase: lifecycle stage that triggered the notification
- JobState: root snapshot (job identity plus one BuildState)
- BuildState: build number, URLs, timing, status, log excerpt and sub-sections
- ScmState: one source-control change
- TestState: test-result summary
- UserData: key/value pairs read from the build workspace

Wire names are camelCase. Fields left as None are omitted by every format, so
"absent" stays distinguishable from "empty".
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel, computed_field
from pydantic.alias_generators import to_camel


class Phase(str, Enum):
    """Build lifecycle stages."""

    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FINALIZED = "FINALIZED"

    def matches(self, event: Optional[str]) -> bool:
        """Whether an endpoint subscribed to ``event`` is notified at this phase.

        An absent event or ``"all"`` subscribes to every phase; otherwise the
        event must equal the phase name, ignoring case.
        """
        if event is None:
            return True
        normalized = event.strip().lower()
        return normalized == "all" or normalized == self.value.lower()


class SnapshotModel(BaseModel):
    """Base for snapshot models: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Plain-data form shared by all formats, absent fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ScmState(SnapshotModel):
    """A single change-set entry from one of the build's SCM sources."""

    author: Optional[str] = None
    commit_id: Optional[str] = None
    commit_msg: Optional[str] = None
    timestamp: Optional[int] = Field(None, description="Commit time (epoch millis)")


class TestState(SnapshotModel):
    """Summary of the build's test results."""

    __test__ = False  # not a pytest test class

    total: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    failed_tests: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def passed(self) -> int:
        return max(self.total - self.failed - self.skipped, 0)


class UserData(RootModel[Dict[str, str]]):
    """Free-form key/value data supplied by the build through its workspace."""

    model_config = ConfigDict(frozen=True)

    root: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.root.get(key, default)

    def __len__(self) -> int:
        return len(self.root)


class BuildState(SnapshotModel):
    """Observable state of one build."""

    number: int
    url: str
    full_url: Optional[str] = None
    phase: Phase
    status: Optional[str] = None
    started_at: int = Field(..., description="Start time (epoch millis)")
    duration: int = Field(0, ge=0, description="Duration (millis)")
    log: str = ""
    parameters: Dict[str, str] = Field(default_factory=dict)
    artifacts: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    scm: List[ScmState] = Field(default_factory=list)
    test_summary: Optional[TestState] = None
    user_data: UserData = Field(default_factory=UserData)

    @computed_field
    @property
    def finished_at(self) -> int:
        return self.started_at + self.duration


class JobState(SnapshotModel):
    """Root of the snapshot sent to an endpoint."""

    name: str
    full_name: str
    url: str
    build: BuildState
