"""
Windows services, controlled through the Service Control Manager's `sc.exe` client.
"""

import logging
import re
from typing import Sequence

from .common import command
from .hosts import HostError, register, ServiceHandle, ServiceHost, ServiceNotFound, ServiceStatus


LOG = logging.getLogger(__name__)

SC = "sc.exe"

# ERROR_SERVICE_DOES_NOT_EXIST
_NOT_FOUND = 1060

_STATE = re.compile(r"^\s*STATE\s*:\s*(\d+)", re.MULTILINE)


def status_from_query(name: str, output: str) -> ServiceStatus:
    """
    Read the numeric `STATE` field of `sc query` output, which matches `ServiceStatus` values.
    """
    match = _STATE.search(output)
    if not match:
        raise HostError("No state reported for service {!r}".format(name))
    try:
        return ServiceStatus(int(match.group(1)))
    except ValueError:
        return ServiceStatus.unknown


def _sc(name: str, *args: str) -> str:
    try:
        proc = command([SC, *args], output=True, check=False)
    except OSError as ex:
        raise HostError("Unable to run sc.exe: {}".format(ex)) from ex
    output = proc.stdout.decode("utf-8", "replace")
    if proc.returncode == _NOT_FOUND:
        raise ServiceNotFound(name)
    elif proc.returncode:
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        raise HostError(" ".join(lines) or "sc.exe exited with status {}".format(proc.returncode))
    return output


class ScHandle(ServiceHandle):

    def _status(self) -> ServiceStatus:
        return status_from_query(self.name, _sc(self.name, "query", self.name))

    def _start(self, args: Sequence[str]) -> None:
        _sc(self.name, "start", self.name, *args)
        LOG.debug("Sent start control to service %r", self.name)


@register
class ScHost(ServiceHost):
    """
    Local Windows Service Control Manager.
    """

    name = "sc"
    handle_class = ScHandle
