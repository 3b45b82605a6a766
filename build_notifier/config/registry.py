"""Endpoint registry backed by the notifier configuration file."""

from typing import List, Optional

from build_notifier.domain.host import JobHandle, normalize_full_name

from .models import EndpointConfig, NotifierConfig


class ConfigEndpointRegistry:
    """Looks up a job's endpoints in ``NotifierConfig.jobs``.

    Jobs are matched by full name (folder separators normalized to ``/``)
    first, then by short name. The registry is read-only.
    """

    def __init__(self, config: NotifierConfig):
        self.config = config

    def endpoints_for(self, job: JobHandle) -> Optional[List[EndpointConfig]]:
        return self.config.get_endpoints(normalize_full_name(job.full_display_name), job.name)
