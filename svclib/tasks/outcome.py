"""
Requests to start a service, and classification of how they ended.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Any, Mapping, Optional, Tuple


class Severity(Enum):
    """
    How serious an outcome is, expressed as the level used to log it.
    """

    info = logging.INFO
    warning = logging.WARNING
    error = logging.ERROR


class Condition(Enum):
    """
    Terminal condition reached while trying to start a service.
    """

    already_running = "already running"
    start_ordered = "ordered to start"
    started = "started"
    start_failed = "start failed"
    stopped_after_start = "stopped after start"
    probe_failed = "status unavailable"
    timed_out = "timed out"
    cancelled = "cancelled"
    simulated = "simulated"


@dataclass(frozen=True)
class StartRequest:
    """
    Everything needed to start one service.

    `ignore_already_running` only affects a service found running (or starting) before the start,
    and `treat_unable_to_start_as_warning` only affects failures to start it; the two are
    independent.  A `timeout` of `None` waits indefinitely.
    """

    name: str
    args: Tuple[str, ...] = ()
    wait: bool = True
    ignore_already_running: bool = False
    treat_unable_to_start_as_warning: bool = False
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accept any sequence, but store a tuple so the request stays immutable.
        object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def from_options(cls, opts: Mapping[str, Any]) -> "StartRequest":
        """
        Build a request from parsed command line options:

            SERVICE [ARG...] [--no-wait] [--ignore-running] [--warn] [--timeout=SECONDS]
        """
        timeout = opts.get("--timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except ValueError:
                raise ValueError("Timeout must be a number of seconds, not {!r}"
                                 .format(timeout)) from None
            if not math.isfinite(timeout):
                raise ValueError("Timeout must be a finite number of seconds")
            if timeout <= 0:
                raise ValueError("Timeout must be positive")
        return cls(name=opts["SERVICE"],
                   args=tuple(opts.get("ARG") or ()),
                   wait=not opts.get("--no-wait", False),
                   ignore_already_running=bool(opts.get("--ignore-running", False)),
                   treat_unable_to_start_as_warning=bool(opts.get("--warn", False)),
                   timeout=timeout)


@dataclass(frozen=True)
class Outcome:
    """
    Classified end state of a start request, with the message to report.
    """

    condition: Condition
    severity: Severity
    message: str

    @property
    def ok(self) -> bool:
        return self.severity is not Severity.error


def _tolerate(flag: bool, tolerated: Severity) -> Severity:
    return tolerated if flag else Severity.error


def classify(condition: Condition, request: StartRequest, detail: Optional[str] = None) -> Outcome:
    """
    Pick the severity and message for a condition, according to the request's tolerance flags.
    """
    warn = request.treat_unable_to_start_as_warning
    if condition is Condition.already_running:
        severity = _tolerate(request.ignore_already_running, Severity.info)
        message = "Service is already running."
    elif condition is Condition.start_failed:
        severity = _tolerate(warn, Severity.warning)
        message = "Service could not be started: {}".format(detail)
    elif condition is Condition.stopped_after_start:
        severity = _tolerate(warn, Severity.warning)
        message = "Service stopped immediately after starting."
    elif condition is Condition.timed_out:
        severity = _tolerate(warn, Severity.warning)
        if request.timeout is None:
            message = "Service did not start in time."
        else:
            message = "Service did not start within {:g} seconds.".format(request.timeout)
    elif condition is Condition.started:
        severity = Severity.info
        message = "Service started."
    elif condition is Condition.start_ordered:
        severity = Severity.info
        message = "Service ordered to start."
    elif condition is Condition.probe_failed:
        severity = Severity.error
        message = "Service status could not be read: {}".format(detail)
    elif condition is Condition.cancelled:
        severity = Severity.warning
        message = "Cancelled while waiting for service to start."
    elif condition is Condition.simulated:
        severity = Severity.info
        message = "Service is running."
    else:
        raise ValueError(condition)
    return Outcome(condition, severity, message)


def log_outcome(outcome: Outcome, logger: logging.Logger) -> None:
    """
    Report an outcome's message at the level matching its severity.
    """
    logger.log(outcome.severity.value, outcome.message)
