"""Notification dispatch for build lifecycle phases.

This module provides the NotificationService that the host calls once per
lifecycle transition. It fans out to the job's endpoints, building, encoding
and sending a snapshot for each subscribed endpoint, and contains every
failure to the endpoint that caused it.
"""

import contextvars
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from build_notifier.config.models import EndpointConfig, Format, NotifierConfig, Protocol
from build_notifier.config.registry import ConfigEndpointRegistry
from build_notifier.domain.host import BuildHandle, EndpointRegistry, LogSink, normalize_full_name
from build_notifier.domain.models import JobState, Phase
from build_notifier.logging import get_logger
from build_notifier.logging.context import log_context

from .expansion import expand_variables
from .formats import BaseFormat, get_format
from .models import NotificationResult
from .protocols import BaseProtocol, get_protocol
from .snapshot import SnapshotBuilder

logger = get_logger(__name__, component="notification")


class SnapshotCache:
    """Snapshots for one dispatch, shared by endpoints with the same log policy.

    Snapshots differ between endpoints only in their console excerpt, so one
    is built per distinct ``loglines`` value and reused for the rest.
    """

    def __init__(self, builder: SnapshotBuilder, phase: Phase, build: BuildHandle, log_sink: LogSink):
        self.builder = builder
        self.phase = phase
        self.build = build
        self.log_sink = log_sink
        self._snapshots: Dict[int, JobState] = {}
        self._lock = threading.Lock()

    def get(self, endpoint: EndpointConfig) -> JobState:
        key = endpoint.loglines or 0
        with self._lock:
            if key not in self._snapshots:
                self._snapshots[key] = self.builder.build(self.phase, self.build, endpoint, self.log_sink)
            return self._snapshots[key]


class NotificationService:
    """Notifies a job's endpoints about one build phase.

    For each endpoint, in registry order:
    1. Skip it unless it subscribes to the phase
    2. Build a snapshot with the endpoint's log policy, reused by later
       endpoints with the same policy
    3. Expand the URL template against the build environment
    4. Serialize with the endpoint's format
    5. Send with the endpoint's protocol

    A failure in steps 2-5 is written to the build log sink and the
    application log, then processing continues with the next endpoint.
    ``handle`` never raises.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        snapshot_builder: Optional[SnapshotBuilder] = None,
        max_workers: int = 1,
        protocol_factory: Optional[Callable[[Protocol], BaseProtocol]] = None,
        format_factory: Optional[Callable[[Format], BaseFormat]] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the notification service.

        Args:
            registry: Endpoint registry to read endpoints from
            snapshot_builder: Snapshot builder (creates one without a root URL if None)
            max_workers: Endpoints notified concurrently; 1 means sequential
            protocol_factory: Builds a transport for a protocol tag
            format_factory: Builds a serializer for a format tag
            logger_instance: Logger instance (uses module logger if None)
        """
        self.registry = registry
        self.snapshot_builder = snapshot_builder or SnapshotBuilder()
        self.max_workers = max(1, max_workers)
        self.protocol_factory = protocol_factory or get_protocol
        self.format_factory = format_factory or get_format
        self.logger = logger_instance or logger

    @classmethod
    def from_config(cls, config: NotifierConfig) -> "NotificationService":
        """Service wired to the registry, root URL and limits in ``config``."""
        user_agent = config.advanced.user_agent
        return cls(
            registry=ConfigEndpointRegistry(config),
            snapshot_builder=SnapshotBuilder(root_url=config.root_url),
            max_workers=config.advanced.max_workers,
            protocol_factory=lambda tag: get_protocol(tag, user_agent=user_agent),
        )

    def handle(self, phase: Phase, build: BuildHandle, log_sink: LogSink) -> List[NotificationResult]:
        """Notify every endpoint of ``build``'s job that subscribes to ``phase``.

        Args:
            phase: Lifecycle phase being reported
            build: Build to snapshot
            log_sink: Build console for operator-visible messages

        Returns:
            One NotificationResult per configured endpoint, in registry order.
            Empty when the job has no endpoints.
        """
        try:
            if not isinstance(phase, Phase):
                phase = Phase(str(phase).upper())
            job = build.job
            job_name = normalize_full_name(job.full_display_name)
            build_number = build.number
        except Exception as e:
            self.logger.error(
                f"Cannot notify for phase {phase!r}: {e}",
                exc_info=True,
                extra={"event": "notification.build.invalid", "error_type": type(e).__name__},
            )
            return []

        with log_context(phase=phase.value, job=job_name, build_number=build_number):
            try:
                endpoints = self.registry.endpoints_for(job)
            except Exception as e:
                self.logger.error(
                    f"Failed to load endpoints for job {job_name}: {e}",
                    exc_info=True,
                    extra={"event": "notification.registry.failed", "error_type": type(e).__name__},
                )
                return []

            if not endpoints:
                self.logger.debug(
                    f"No endpoints configured for job {job_name}",
                    extra={"event": "notification.no_endpoints"},
                )
                return []

            results = self._dispatch(phase, build, list(endpoints), log_sink)

            sent = sum(1 for r in results if r.status == "sent")
            skipped = sum(1 for r in results if r.status == "skipped")
            failed = sum(1 for r in results if r.status == "failed")
            self.logger.info(
                f"Notification batch complete for {job_name} #{build_number} ({phase.value}): "
                f"{sent} sent, {skipped} skipped, {failed} failed (total: {len(results)})",
                extra={
                    "event": "notification.batch.completed",
                    "sent": sent,
                    "skipped": skipped,
                    "failed": failed,
                },
            )
            return results

    def _dispatch(
        self,
        phase: Phase,
        build: BuildHandle,
        endpoints: Sequence[EndpointConfig],
        log_sink: LogSink,
    ) -> List[NotificationResult]:
        snapshots = SnapshotCache(self.snapshot_builder, phase, build, log_sink)

        if self.max_workers == 1 or len(endpoints) == 1:
            return [
                self.notify_endpoint(phase, build, endpoint, log_sink, snapshots)
                for endpoint in endpoints
            ]

        # Pool threads do not inherit contextvars, so each task runs in a copy
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(endpoints)),
            thread_name_prefix="notifier",
        ) as pool:
            futures = [
                pool.submit(
                    contextvars.copy_context().run,
                    self.notify_endpoint, phase, build, endpoint, log_sink, snapshots,
                )
                for endpoint in endpoints
            ]
            return [future.result() for future in futures]

    def notify_endpoint(
        self,
        phase: Phase,
        build: BuildHandle,
        endpoint: EndpointConfig,
        log_sink: LogSink,
        snapshots: Optional[SnapshotCache] = None,
    ) -> NotificationResult:
        """Notify a single endpoint. Never raises.

        Args:
            snapshots: Snapshots already built during this dispatch (a fresh
                snapshot is built if None)
        """
        identity = str(endpoint)

        if not phase.matches(endpoint.event):
            return NotificationResult(endpoint=identity, status="skipped")

        started = time.monotonic()
        expanded_url: Optional[str] = None

        with log_context(endpoint=identity):
            try:
                log_sink.println(f"Notifying endpoint '{identity}'")
                if snapshots is None:
                    snapshots = SnapshotCache(self.snapshot_builder, phase, build, log_sink)
                job_state = snapshots.get(endpoint)
                expanded_url = expand_variables(endpoint.url, build.get_environment())
                payload = self.format_factory(endpoint.format).serialize(job_state)

                protocol = self.protocol_factory(endpoint.protocol)
                try:
                    protocol.send(expanded_url, payload, endpoint.timeout, endpoint.is_json)
                finally:
                    protocol.close()

            except Exception as e:
                error_type = type(e).__name__
                duration = time.monotonic() - started
                log_sink.error(f"Failed to notify endpoint '{identity}' - {error_type}: {e}")
                self.logger.error(
                    f"Failed to notify endpoint {identity}: {e}",
                    exc_info=True,
                    extra={
                        "event": "notification.endpoint.failed",
                        "error_type": error_type,
                        "url": expanded_url,
                        "duration_seconds": round(duration, 3),
                    },
                )
                return NotificationResult(
                    endpoint=identity,
                    status="failed",
                    url=expanded_url,
                    error_type=error_type,
                    error=str(e),
                    duration_seconds=duration,
                )

            duration = time.monotonic() - started
            self.logger.info(
                f"Notified endpoint {identity}",
                extra={
                    "event": "notification.endpoint.sent",
                    "url": expanded_url,
                    "payload_bytes": len(payload),
                    "duration_seconds": round(duration, 3),
                },
            )
            return NotificationResult(
                endpoint=identity,
                status="sent",
                url=expanded_url,
                duration_seconds=duration,
            )

