"""
Single status and start calls against an open service handle.

Unlike the rest of the plumbing, these return a `Fault` rather than raising when the host fails, so
that callers can treat every failure as an ordinary value.
"""

import logging
import subprocess
from typing import Sequence, Union

from .common import Fault, Result, State
from .hosts import HostError, ServiceHandle, ServiceStatus


LOG = logging.getLogger(__name__)

_HOST_FAILURES = (HostError, subprocess.CalledProcessError, OSError)


def probe_status(handle: ServiceHandle) -> Union[ServiceStatus, Fault]:
    """
    Read the current status of a service.
    """
    try:
        status = handle.status()
    except _HOST_FAILURES as ex:
        LOG.debug("Status query for %r failed: %s", handle.name, ex)
        return Fault.from_exception(ex)
    LOG.debug("Service %r is %s", handle.name, status.name)
    return status


def start(handle: ServiceHandle, args: Sequence[str] = ()) -> Union[Result[None], Fault]:
    """
    Request that the host start a service, passing any startup arguments.  Not retried on failure.
    """
    try:
        handle.start(args)
    except _HOST_FAILURES as ex:
        LOG.debug("Start of %r failed: %s", handle.name, ex)
        return Fault.from_exception(ex)
    return Result(State.success)
