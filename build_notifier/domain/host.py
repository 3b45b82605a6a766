"""Interfaces to the host build system.

The notifier never owns build data. It reads it through the narrow protocols
below, for the duration of a single dispatch:

- BuildHandle: job identity, timing, result, environment, parameters, console
  log, workspace files, artifacts, SCM changes and test results
- EndpointRegistry: per-job endpoint configuration
- LogSink: operator-visible build console lines

StaticBuild is an in-memory BuildHandle loaded from a build descriptor file.
The CLI uses it to fire notifications outside a live build system.
"""

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import yaml

from build_notifier.utils.timestamps import to_epoch_millis

from .models import ScmState, TestState

# Separator the host puts between folder names in a job's display name
FOLDER_SEPARATOR = " » "


@dataclass(frozen=True)
class BuildParameter:
    """A build parameter as reported by the host."""

    name: str
    value: str
    sensitive: bool = False


@dataclass(frozen=True)
class Artifact:
    """An archived build artifact."""

    file_name: str
    relative_path: str


class JobHandle(Protocol):
    name: str
    full_display_name: str
    url: str


def normalize_full_name(full_display_name: str) -> str:
    """Replace the host's folder separator glyph with ``/``."""
    return full_display_name.replace(FOLDER_SEPARATOR, "/")


@runtime_checkable
class BuildHandle(Protocol):
    """Read-only view of a running or finished build."""

    @property
    def job(self) -> JobHandle: ...

    @property
    def number(self) -> int: ...

    @property
    def url(self) -> str: ...

    @property
    def result(self) -> Optional[str]: ...

    @property
    def start_time_millis(self) -> int: ...

    @property
    def duration_millis(self) -> int: ...

    def get_environment(self) -> Mapping[str, str]: ...

    def get_parameters(self) -> Sequence[BuildParameter]: ...

    def get_log(self) -> str: ...

    def get_log_lines(self, count: int) -> List[str]: ...

    def read_workspace_file(self, name: str) -> Optional[str]: ...

    def get_artifacts(self) -> Sequence[Artifact]: ...

    def get_changes(self) -> Sequence[ScmState]: ...

    def get_test_results(self) -> Optional[TestState]: ...


class EndpointRegistry(Protocol):
    """Source of the endpoints configured for a job."""

    def endpoints_for(self, job: JobHandle) -> Optional[Sequence[Any]]: ...


class LogSink(Protocol):
    """Append-only build console."""

    def println(self, line: str) -> None: ...

    def error(self, line: str) -> None: ...


class StreamLogSink:
    """LogSink writing to a text stream, safe to share between worker threads."""

    def __init__(self, stream: IO[str]):
        self.stream = stream
        self._lock = threading.Lock()

    def println(self, line: str) -> None:
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()

    def error(self, line: str) -> None:
        self.println(f"ERROR: {line}")


@dataclass(frozen=True)
class StaticJob:
    name: str
    full_display_name: str
    url: str


@dataclass
class StaticBuild:
    """BuildHandle backed by plain data.

    ``workspace`` is a directory on disk (or None for builds without one);
    ``console_log`` is the full console text.
    """

    job: StaticJob
    number: int
    url: str
    start_time_millis: int
    duration_millis: int = 0
    result: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)
    parameters: List[BuildParameter] = field(default_factory=list)
    console_log: str = ""
    workspace: Optional[Path] = None
    artifacts: List[Artifact] = field(default_factory=list)
    changes: List[ScmState] = field(default_factory=list)
    test_results: Optional[TestState] = None

    def get_environment(self) -> Mapping[str, str]:
        env = dict(self.environment)
        env.setdefault("JOB_NAME", self.job.name)
        env.setdefault("BUILD_NUMBER", str(self.number))
        return env

    def get_parameters(self) -> Sequence[BuildParameter]:
        return list(self.parameters)

    def get_log(self) -> str:
        return self.console_log

    def get_log_lines(self, count: int) -> List[str]:
        lines = self.console_log.splitlines()
        return lines[-count:] if count > 0 else []

    def read_workspace_file(self, name: str) -> Optional[str]:
        """Text of ``name`` inside the workspace, or None if it does not exist."""
        if self.workspace is None:
            return None
        path = Path(self.workspace) / name
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def get_artifacts(self) -> Sequence[Artifact]:
        return list(self.artifacts)

    def get_changes(self) -> Sequence[ScmState]:
        return list(self.changes)

    def get_test_results(self) -> Optional[TestState]:
        return self.test_results

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "StaticBuild":
        """Build a StaticBuild from a descriptor mapping.

        Relative ``workspace`` and ``console_log_file`` paths resolve against
        ``base_dir``.

        Raises:
            KeyError: If a required key (job.name, number) is missing
            ValueError: If a value has the wrong shape
        """
        base_dir = base_dir or Path.cwd()
        job_data = data["job"]
        job = StaticJob(
            name=job_data["name"],
            full_display_name=job_data.get("full_display_name", job_data["name"]),
            url=job_data.get("url", f"job/{job_data['name']}/"),
        )
        number = int(data["number"])

        console_log = data.get("console_log", "")
        if data.get("console_log_file"):
            console_log = (base_dir / data["console_log_file"]).read_text(encoding="utf-8")

        workspace = data.get("workspace")
        test_results = data.get("test_results")

        return cls(
            job=job,
            number=number,
            url=data.get("url", f"{job.url}{number}/"),
            start_time_millis=to_epoch_millis(data.get("start_time", data.get("start_time_millis", 0))),
            duration_millis=int(data.get("duration_millis", 0)),
            result=data.get("result"),
            environment={str(k): str(v) for k, v in (data.get("environment") or {}).items()},
            parameters=[
                BuildParameter(
                    name=p["name"],
                    value=str(p.get("value", "")),
                    sensitive=bool(p.get("sensitive", False)),
                )
                for p in data.get("parameters") or []
            ],
            console_log=console_log,
            workspace=(base_dir / workspace) if workspace else None,
            artifacts=[
                Artifact(file_name=a["file_name"], relative_path=a["relative_path"])
                for a in data.get("artifacts") or []
            ],
            changes=[_parse_change(c) for c in data.get("changes") or []],
            test_results=TestState.model_validate(test_results) if test_results else None,
        )


def load_build_descriptor(path: Path) -> StaticBuild:
    """Load a YAML or JSON build descriptor into a StaticBuild."""
    text = Path(path).read_text(encoding="utf-8")
    if Path(path).suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError(f"Build descriptor {path} must contain a mapping")
    return StaticBuild.from_dict(data, base_dir=Path(path).parent)


def _parse_change(change: Dict[str, Any]) -> ScmState:
    change = dict(change)
    if change.get("timestamp") is not None:
        change["timestamp"] = to_epoch_millis(change["timestamp"])
    return ScmState.model_validate(change)
