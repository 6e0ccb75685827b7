"""Resolve the host name reported with checkout telemetry.

Candidates are tried in order: explicit override, DD_HOSTNAME, HOSTNAME,
then socket.gethostname(). The first RFC 1123 valid name that is not a
loopback alias wins. When none qualifies the literal placeholder is
returned; resolution never raises.
"""

from __future__ import annotations

import os
import re
import socket
from collections.abc import Callable, Mapping

import structlog

from scmpulse.contracts.events import HOSTNAME_PLACEHOLDER

logger = structlog.get_logger(__name__)

_MAX_HOSTNAME_LENGTH = 255
_LABEL = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?")
_LOOPBACK_NAMES = frozenset({"localhost", "localhost.localdomain", "localhost6.localdomain6", "ip6-localhost"})
_HOSTNAME_ENV_VARS = ("DD_HOSTNAME", "HOSTNAME")


def is_valid_hostname(hostname: str | None) -> bool:
    """Return True for an RFC 1123 host name that is not a loopback alias."""
    if not hostname or len(hostname) > _MAX_HOSTNAME_LENGTH:
        return False
    if hostname.lower() in _LOOPBACK_NAMES:
        return False
    labels = hostname.rstrip(".").split(".")
    return all(_LABEL.fullmatch(label) for label in labels)


def resolve_hostname(
    override: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    lookup: Callable[[], str] = socket.gethostname,
    default: str = HOSTNAME_PLACEHOLDER,
) -> str:
    """Return the first valid host name candidate, or ``default``.

    Args:
        override: Configured host name, checked first
        environ: Environment to read (defaults to os.environ)
        lookup: Host name lookup of last resort
        default: Returned when no candidate is valid
    """
    env = os.environ if environ is None else environ
    candidates = [override, *(env.get(name) for name in _HOSTNAME_ENV_VARS)]
    for candidate in candidates:
        if is_valid_hostname(candidate):
            return str(candidate)

    try:
        looked_up = lookup()
    except OSError as e:
        logger.debug("Hostname lookup failed", error=str(e))
        return default
    if is_valid_hostname(looked_up):
        return looked_up
    return default
