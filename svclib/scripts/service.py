"""
Scripts to control individual services.
"""

import signal
import threading

from .utils import DocOptArgs, entrypoint, error
from ..describe import describe
from ..plumbing import services
from ..plumbing.common import Fault
from ..plumbing.hosts import ServiceHost
from ..tasks.outcome import StartRequest
from ..tasks.service import start_service


@entrypoint
def start(opts: DocOptArgs, host: ServiceHost, request: StartRequest):
    """
    Start a service, and by default wait until it reports that it's running.

    A service that's already running or starting is an error unless --ignore-running is set.  A
    service that can't be started, or stops again straight away, is an error unless --warn is set.
    Press Ctrl-C while waiting to stop polling.

    Usage: {script} [options] SERVICE [--] [ARG...]

    Options:
        --no-wait           Return as soon as the service has been ordered to start.
        --ignore-running    Don't fail if the service is already running or starting.
        --warn              Only warn if the service can't be started.
        --timeout=SECONDS   Give up waiting for the service after this many seconds.
        --simulate          Describe the start without contacting the host.
    """
    print(describe(request))
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        result = start_service(host, request, simulate=bool(opts.get("--simulate")),
                               cancel=cancel)
    finally:
        signal.signal(signal.SIGINT, previous)
    outcome = result.value
    if not outcome.ok:
        error(exit=1)


@entrypoint
def status(opts: DocOptArgs, host: ServiceHost):
    """
    Show the current status of a service.

    Usage: {script} SERVICE
    """
    with host.open(opts["SERVICE"]) as handle:
        current = services.probe_status(handle)
    if isinstance(current, Fault):
        error(current.message, exit=1)
    print(current.name)
