"""
Linux services managed by systemd, controlled through `systemctl`.
"""

import logging
import subprocess
from typing import Dict, Sequence

from .common import command
from .hosts import HostError, register, ServiceHandle, ServiceHost, ServiceNotFound, ServiceStatus


LOG = logging.getLogger(__name__)

SYSTEMCTL = "/bin/systemctl"

_ACTIVE_STATES = {"active": ServiceStatus.running,
                  "reloading": ServiceStatus.running,
                  "activating": ServiceStatus.start_pending,
                  "deactivating": ServiceStatus.stop_pending,
                  "inactive": ServiceStatus.stopped,
                  "failed": ServiceStatus.stopped}


def parse_show(output: str) -> Dict[str, str]:
    """
    Split `systemctl show` output into a mapping of property names to values.
    """
    props = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            props[key.strip()] = value.strip()
    return props


def status_from_props(name: str, props: Dict[str, str]) -> ServiceStatus:
    """
    Map a unit's load and active states onto a `ServiceStatus`.

    A stopped unit with a job still queued (`Job` set) is treated as starting, as a start job
    queued with `--no-block` leaves the unit inactive until systemd gets round to it.
    """
    if props.get("LoadState") == "not-found":
        raise ServiceNotFound(name)
    status = _ACTIVE_STATES.get(props.get("ActiveState", ""), ServiceStatus.unknown)
    if status is ServiceStatus.stopped and props.get("Job", "") not in ("", "0"):
        return ServiceStatus.start_pending
    return status


def _systemctl(*args: str) -> str:
    try:
        proc = command([SYSTEMCTL, *args], output=True)
    except subprocess.CalledProcessError as ex:
        stderr = (ex.stderr or b"").decode("utf-8", "replace").strip()
        raise HostError(stderr or "systemctl exited with status {}".format(ex.returncode)) from ex
    except OSError as ex:
        raise HostError("Unable to run systemctl: {}".format(ex)) from ex
    return proc.stdout.decode("utf-8", "replace")


class SystemdHandle(ServiceHandle):

    def _status(self) -> ServiceStatus:
        output = _systemctl("show", "--property=LoadState", "--property=ActiveState",
                            "--property=Job", "--", self.name)
        return status_from_props(self.name, parse_show(output))

    def _start(self, args: Sequence[str]) -> None:
        if args:
            raise HostError("systemd units do not accept startup arguments")
        # Don't wait for the start job, polling is left to the caller.
        _systemctl("start", "--no-block", "--", self.name)
        LOG.debug("Queued start job for unit %r", self.name)


@register
class SystemdHost(ServiceHost):
    """
    Local systemd instance.
    """

    name = "systemd"
    handle_class = SystemdHandle
