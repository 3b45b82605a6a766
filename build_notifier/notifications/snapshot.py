"""Assembly of job-state snapshots from a build handle.

A snapshot is built for every phase and endpoint log policy, because the
console excerpt depends on the endpoint's ``loglines`` setting. Reading the
log, the workspace properties file, parameters, artifacts, SCM changes or
test results can each fail on its own; such a failure is logged and degrades
that one section to a placeholder or empty value instead of failing the
snapshot.
"""

import logging
from typing import Callable, Dict, List, Optional, TypeVar

from build_notifier.config.models import EndpointConfig
from build_notifier.domain.host import BuildHandle, LogSink, normalize_full_name
from build_notifier.domain.models import BuildState, JobState, Phase, ScmState, UserData
from build_notifier.logging import get_logger
from build_notifier.utils.properties import PropertiesParseError, parse_properties

logger = get_logger(__name__, component="snapshot")

USER_DATA_FILE = "notification.properties"
NO_LOG_PLACEHOLDER = "Log is not available or you have requested no log data."
LOG_UNAVAILABLE_PLACEHOLDER = "Unable to retrieve log"
FULL_LOG = -1

T = TypeVar("T")


class SnapshotBuilder:
    """Builds JobState snapshots.

    Args:
        root_url: Host root URL; when None, ``fullUrl`` is left absent
        logger_instance: Logger instance (uses module logger if None)
    """

    def __init__(self, root_url: Optional[str] = None, logger_instance: Optional[logging.Logger] = None):
        self.root_url = root_url
        self.logger = logger_instance or logger

    def build(
        self,
        phase: Phase,
        build: BuildHandle,
        endpoint: EndpointConfig,
        log_sink: Optional[LogSink] = None,
    ) -> JobState:
        """Snapshot ``build`` for delivery to ``endpoint`` at ``phase``."""
        job = build.job

        build_state = BuildState(
            number=build.number,
            url=build.url,
            full_url=self.root_url + build.url if self.root_url is not None else None,
            phase=phase,
            status=str(build.result) if build.result is not None else None,
            started_at=build.start_time_millis,
            duration=build.duration_millis,
            log=self.read_log(build, endpoint.loglines),
            parameters=self._section("parameters", dict, lambda: self.collect_parameters(build)),
            artifacts=self._section("artifacts", dict, lambda: self.collect_artifacts(build)),
            scm=self._section("scm", list, lambda: self.collect_changes(build)),
            test_summary=self._section("test_results", lambda: None, build.get_test_results),
            user_data=self.load_user_data(build, log_sink),
        )

        return JobState(
            name=job.name,
            full_name=normalize_full_name(job.full_display_name),
            url=job.url,
            build=build_state,
        )

    def read_log(self, build: BuildHandle, loglines: Optional[int]) -> str:
        """Console excerpt for a ``loglines`` policy.

        0 or None gives a placeholder, -1 the full log and N > 0 the last N
        lines joined with newlines.
        """
        if not loglines:
            return NO_LOG_PLACEHOLDER

        try:
            if loglines == FULL_LOG:
                return build.get_log()
            return "\n".join(build.get_log_lines(loglines))
        except Exception as e:
            self.logger.warning(
                f"Unable to read console log: {e}",
                extra={"event": "snapshot.log.unavailable", "error_type": type(e).__name__},
            )
            return LOG_UNAVAILABLE_PLACEHOLDER

    @staticmethod
    def collect_parameters(build: BuildHandle) -> Dict[str, str]:
        """Build parameters, sensitive ones dropped entirely."""
        return {
            param.name: param.value
            for param in build.get_parameters()
            if not param.sensitive
        }

    def collect_artifacts(self, build: BuildHandle) -> Dict[str, Dict[str, str]]:
        """Map each artifact's file name to its archive URL."""
        base = (self.root_url or "") + build.url
        return {
            artifact.file_name: {"archive": f"{base}artifact/{artifact.relative_path}"}
            for artifact in build.get_artifacts()
        }

    @staticmethod
    def collect_changes(build: BuildHandle) -> List[ScmState]:
        return list(build.get_changes())

    def load_user_data(self, build: BuildHandle, log_sink: Optional[LogSink] = None) -> UserData:
        """Key/value pairs from ``notification.properties`` in the workspace.

        A missing file is normal and yields empty data; an unreadable or
        malformed file is logged and also yields empty data.
        """
        try:
            text = build.read_workspace_file(USER_DATA_FILE)
        except Exception as e:
            self._user_data_failed(e, log_sink)
            return UserData()

        if text is None:
            if log_sink is not None:
                log_sink.println(f"{USER_DATA_FILE} does not exist")
            return UserData()

        try:
            pairs = parse_properties(text)
        except PropertiesParseError as e:
            self._user_data_failed(e, log_sink)
            return UserData()

        self.logger.debug(
            f"Loaded {len(pairs)} user data entries",
            extra={"event": "snapshot.user_data.loaded", "count": len(pairs)},
        )
        return UserData(pairs)

    def _user_data_failed(self, error: Exception, log_sink: Optional[LogSink]) -> None:
        message = f"Unable to read {USER_DATA_FILE}: {error}"
        self.logger.warning(
            message,
            extra={"event": "snapshot.user_data.failed", "error_type": type(error).__name__},
        )
        if log_sink is not None:
            log_sink.println(message)

    def _section(self, name: str, empty: Callable[[], T], collect: Callable[[], T]) -> T:
        """Run one collector; a failing provider yields ``empty()``."""
        try:
            return collect()
        except Exception as e:
            self.logger.warning(
                f"Failed to collect {name}: {e}",
                exc_info=True,
                extra={
                    "event": "snapshot.section.failed",
                    "section": name,
                    "error_type": type(e).__name__,
                },
            )
            return empty()
