"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

LONG_TIMEOUT_SECONDS = 120


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for likely mistakes that are still valid.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    jobs = config_dict.get("jobs") or {}
    if not isinstance(jobs, dict):
        return warning_messages

    if not jobs:
        warning_messages.append("No jobs configured; every notification will be a no-op")

    for job_name, endpoints in jobs.items():
        if not endpoints:
            warning_messages.append(f"Job '{job_name}' has no endpoints")
            continue
        if not isinstance(endpoints, list):
            continue

        for idx, endpoint in enumerate(endpoints):
            if not isinstance(endpoint, dict):
                continue
            label = f"Job '{job_name}' endpoint {idx} ({endpoint.get('url', '?')})"

            # The content type is not checked against the payload format
            fmt = str(endpoint.get("format", "JSON")).upper()
            if endpoint.get("json") and fmt != "JSON":
                warning_messages.append(
                    f"{label} sends {fmt} payloads with a JSON content type"
                )

            protocol = str(endpoint.get("protocol", "HTTP")).upper()
            if endpoint.get("json") and protocol != "HTTP":
                warning_messages.append(
                    f"{label} sets json=true, which only affects HTTP endpoints"
                )

            timeout = endpoint.get("timeout")
            if isinstance(timeout, int) and timeout > LONG_TIMEOUT_SECONDS:
                warning_messages.append(
                    f"{label} has a long timeout ({timeout}s) that can delay the build"
                )

            loglines = endpoint.get("loglines")
            if loglines == -1 and protocol == "UDP":
                warning_messages.append(
                    f"{label} sends the full log over UDP and may exceed the datagram size"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit configuration warnings.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
