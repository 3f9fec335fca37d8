"""
Host capability interface for controlling a single named service, and backend selection.

A backend is a `ServiceHost`, which hands out `ServiceHandle` objects for one service at a time.
Handles are scoped resources -- use them as context managers so that they are released on every
exit path:

    with host.open("nginx") as handle:
        handle.status()
"""

from enum import Enum
import logging
import os
import platform
from typing import Dict, Optional, Sequence, Type


LOG = logging.getLogger(__name__)

ENV_BACKEND = "SVCLIB_BACKEND"
"""
Environment variable naming the default backend, overriding detection by platform.
"""


class HostError(Exception):
    """
    The host's service manager could not be reached, or rejected a request.
    """


class ServiceNotFound(HostError):
    """
    No service of the requested name exists on the host.
    """

    def __init__(self, name: str):
        super().__init__("Service {!r} not found".format(name))
        self.name = name


class ServiceStatus(Enum):
    """
    Lifecycle state of a service as reported by the host.
    """

    stopped = 1
    start_pending = 2
    stop_pending = 3
    running = 4
    continue_pending = 5
    pause_pending = 6
    paused = 7
    unknown = 0


class ServiceHandle:
    """
    Open reference to one service on a host.

    Subclasses implement `_status` and `_start`, and may override `_release` to free any
    host-side resources.
    """

    def __init__(self, host: "ServiceHost", name: str):
        self.host = host
        self.name = name
        self.closed = False

    def status(self) -> ServiceStatus:
        """
        Query the current status of the service, raising `HostError` on failure.
        """
        self._check_open()
        return self._status()

    def start(self, args: Sequence[str] = ()) -> None:
        """
        Ask the host's service manager to start the service, raising `HostError` on failure.
        """
        self._check_open()
        self._start(list(args))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        LOG.debug("Releasing handle for service %r", self.name)
        self._release()

    def _check_open(self) -> None:
        if self.closed:
            raise RuntimeError("Handle for service {!r} is closed".format(self.name))

    def _status(self) -> ServiceStatus:
        raise NotImplementedError

    def _start(self, args: Sequence[str]) -> None:
        raise NotImplementedError

    def _release(self) -> None:
        pass

    def __enter__(self) -> "ServiceHandle":
        return self

    def __exit__(self, exception_type, exception_value, traceback):
        self.close()

    def __repr__(self) -> str:
        return "<{}: {!r}{}>".format(self.__class__.__name__, self.name,
                                      " (closed)" if self.closed else "")


class ServiceHost:
    """
    Service manager of a target host, able to open handles to its services.
    """

    name = "<abstract>"
    handle_class: Type[ServiceHandle] = ServiceHandle

    def open(self, name: str) -> ServiceHandle:
        """
        Acquire a handle for the named service.  No validation of the name happens here.
        """
        LOG.debug("Opening handle for service %r on %s", name, self.name)
        return self.handle_class(self, name)

    def __repr__(self) -> str:
        return "<{}>".format(self.__class__.__name__)


BACKENDS: Dict[str, Type[ServiceHost]] = {}


def register(cls: Type[ServiceHost]) -> Type[ServiceHost]:
    """
    Decorator: make a `ServiceHost` subclass selectable by its `name` in `get_host`.
    """
    BACKENDS[cls.name] = cls
    return cls


def default_backend() -> str:
    """
    Name of the backend to use when none is requested explicitly.
    """
    env = os.getenv(ENV_BACKEND)
    if env:
        return env
    elif platform.system() == "Windows":
        return "sc"
    else:
        return "systemd"


def get_host(backend: Optional[str] = None) -> ServiceHost:
    """
    Create a host for the given backend name, or the default backend for this machine.
    """
    # Backends register themselves on import.
    from . import systemd, windows  # noqa: F401
    name = backend or default_backend()
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError("Unknown backend {!r}, expected one of: {}"
                         .format(name, ", ".join(sorted(BACKENDS)))) from None
    return cls()
