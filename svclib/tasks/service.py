"""
Start a service, optionally waiting until the host reports it as running.

Both `start_service` and its asyncio counterpart `start_service_async` always return normally --
every failure of the host is classified into the `Outcome` carried as the result's value, and
logged at that outcome's severity.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Callable, List, Optional, Tuple, Union

from ..plumbing import services
from ..plumbing.common import Collect, Fault, Result
from ..plumbing.hosts import ServiceHandle, ServiceHost, ServiceStatus
from .outcome import classify, Condition, log_outcome, Outcome, StartRequest


LOG = logging.getLogger(__name__)

POLL_INTERVAL = 3
"""
Seconds to wait between status checks while a service is starting.
"""

Poll = Tuple[Condition, Optional[str]]
"""
Terminal state of the poller, along with any failure detail.
"""

_ALREADY_RUNNING = (ServiceStatus.running, ServiceStatus.start_pending)


def _precheck(status: Union[ServiceStatus, Fault], request: StartRequest) -> Optional[Outcome]:
    # Decide from the initial status whether a start should be attempted at all.
    if isinstance(status, Fault):
        return classify(Condition.probe_failed, request, status.message)
    elif status in _ALREADY_RUNNING:
        return classify(Condition.already_running, request)
    else:
        return None


def _settled(status: Union[ServiceStatus, Fault]) -> Optional[Poll]:
    # Anything other than running or stopped means the service is still on its way.
    if isinstance(status, Fault):
        return (Condition.probe_failed, status.message)
    elif status is ServiceStatus.running:
        return (Condition.started, None)
    elif status is ServiceStatus.stopped:
        return (Condition.stopped_after_start, None)
    else:
        return None


def _suspend(cancel: Optional[threading.Event]) -> bool:
    if cancel is None:
        time.sleep(POLL_INTERVAL)
        return False
    return cancel.wait(POLL_INTERVAL)


def wait_for_running(handle: ServiceHandle, timeout: Optional[float] = None,
                     cancel: Optional[threading.Event] = None) -> Poll:
    """
    Poll a service's status every `POLL_INTERVAL` seconds until it's either running or stopped.

    Without a `timeout`, polling continues for as long as the service stays in a pending state.
    The timeout is only checked between polls, so may be overrun by up to one interval.  If a
    `cancel` event is given, it's checked at each pause and ends the wait once set.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        settled = _settled(services.probe_status(handle))
        if settled:
            return settled
        if deadline is not None and time.monotonic() >= deadline:
            return (Condition.timed_out, None)
        if _suspend(cancel):
            return (Condition.cancelled, None)


def _start(handle: ServiceHandle, request: StartRequest,
           cancel: Optional[threading.Event]) -> Collect[Outcome]:
    outcome = _precheck(services.probe_status(handle), request)
    if outcome:
        return outcome
    res_start = services.start(handle, request.args)
    if isinstance(res_start, Fault):
        return classify(Condition.start_failed, request, res_start.message)
    yield res_start
    if not request.wait:
        return classify(Condition.start_ordered, request)
    LOG.info("Waiting for service to start...")
    condition, detail = wait_for_running(handle, request.timeout, cancel)
    return classify(condition, request, detail)


@Result.collect
def start_service(host: ServiceHost, request: StartRequest, simulate: bool = False,
                  cancel: Optional[threading.Event] = None) -> Collect[Outcome]:
    """
    Start the requested service on a host, unless it's already running or starting.

    In simulation mode, the host is never contacted and the service is assumed to be running.
    """
    LOG.info("Starting service %s...", request.name)
    if simulate:
        outcome = classify(Condition.simulated, request)
    else:
        with host.open(request.name) as handle:
            outcome = yield from _start(handle, request, cancel)
    log_outcome(outcome, LOG)
    return outcome


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    # Host calls block on external commands, so keep them off the event loop.
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fn, *args)


async def _suspend_async(cancel: Optional[asyncio.Event]) -> bool:
    if cancel is None:
        await asyncio.sleep(POLL_INTERVAL)
        return False
    elif cancel.is_set():
        return True
    try:
        await asyncio.wait_for(cancel.wait(), POLL_INTERVAL)
    except asyncio.TimeoutError:
        return False
    return True


async def wait_for_running_async(handle: ServiceHandle, timeout: Optional[float] = None,
                                 cancel: Optional[asyncio.Event] = None) -> Poll:
    """
    Asynchronous version of `wait_for_running`, yielding to the event loop between polls.
    """
    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout
    while True:
        settled = _settled(await _call(services.probe_status, handle))
        if settled:
            return settled
        if deadline is not None and loop.time() >= deadline:
            return (Condition.timed_out, None)
        if await _suspend_async(cancel):
            return (Condition.cancelled, None)


async def _start_async(handle: ServiceHandle, request: StartRequest,
                       cancel: Optional[asyncio.Event], parts: List[Result[Any]]) -> Outcome:
    outcome = _precheck(await _call(services.probe_status, handle), request)
    if outcome:
        return outcome
    res_start = await _call(services.start, handle, request.args)
    if isinstance(res_start, Fault):
        return classify(Condition.start_failed, request, res_start.message)
    parts.append(res_start)
    if not request.wait:
        return classify(Condition.start_ordered, request)
    LOG.info("Waiting for service to start...")
    condition, detail = await wait_for_running_async(handle, request.timeout, cancel)
    return classify(condition, request, detail)


async def start_service_async(host: ServiceHost, request: StartRequest, simulate: bool = False,
                              cancel: Optional[asyncio.Event] = None) -> Result[Outcome]:
    """
    Asynchronous version of `start_service`, for use inside a running event loop.
    """
    LOG.info("Starting service %s...", request.name)
    parts: List[Result[Any]] = []
    if simulate:
        outcome = classify(Condition.simulated, request)
    else:
        with host.open(request.name) as handle:
            outcome = await _start_async(handle, request, cancel, parts)
    log_outcome(outcome, LOG)
    return Result(None, outcome, parts, start_service_async)
