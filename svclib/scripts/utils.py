"""
Helpers for converting methods into scripts, and filling in arguments with hosts and requests.
"""

from functools import wraps
from inspect import cleandoc, signature
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Union

from docopt import docopt

from ..plumbing.hosts import get_host, ServiceHost
from ..tasks.outcome import StartRequest


DocOptArgs = Dict[str, Union[bool, str, List[str], None]]


ENTRYPOINTS: List[str] = []


def entrypoint(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator to make an entrypoint out of a generic function.

    This uses `docopt` to parse arguments according to the method docstring, and will be formatted
    with `{script}` set to the script name.  At minimum, it should contain `Usage: {script}`.

    Functions may optionally accept arguments, but they must be annotated with a recognised type in
    order to be filled in:

    - `DocOptArgs` (a `dict` of input parameters parsed from the usage line)
    - `ServiceHost` (the backend named by `--backend`, or the default for this machine)
    - `StartRequest` (built from the `SERVICE` and `ARG` parameters and related options)

    An example function:

        @entrypoint
        def start(opts: DocOptArgs, host: ServiceHost, request: StartRequest):
            \"""
            Start a service.

            Usage: {script} SERVICE [ARG...]
            \"""
    """
    label = "svclib-{}-{}".format(fn.__module__.rsplit(".", 1)[-1],
                                  fn.__qualname__).replace("_", "-")

    @wraps(fn)
    def wrap(opts: Optional[DocOptArgs] = None):
        extra: Dict[str, Any] = {}
        script = "{} [--debug] [--backend=NAME]".format(label)
        if opts is None:
            doc = cleandoc(fn.__doc__.format(script=script))
            opts = docopt(doc)
        debug = opts.pop("--debug", False)
        logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                            format="%(levelname)s: %(message)s")
        backend = opts.pop("--backend", None)
        # Detect resolvable-typed arguments and fill in their values.
        sig = signature(fn)
        for param in sig.parameters.values():
            name = param.name
            cls = param.annotation
            try:
                if cls is DocOptArgs:
                    extra[name] = opts
                elif cls is ServiceHost:
                    extra[name] = get_host(backend)
                elif cls is StartRequest:
                    extra[name] = StartRequest.from_options(opts)
                else:
                    raise RuntimeError("Bad parameter {!r} type {!r}".format(name, cls))
            except ValueError as ex:
                error(str(ex), exit=2)
        fn(**extra)
    wrap.__doc__ = wrap.__doc__.format(script=label)
    # Create a console script line for setup.
    target = "{}:{}".format(fn.__module__, fn.__qualname__)
    ENTRYPOINTS.append("{}={}".format(label, target))
    return wrap


def error(msg: Optional[str] = None, *, exit: Optional[int] = None, colour: Optional[str] = None):
    """
    Print an error message and/or exit.
    """
    if msg:
        colour = colour or ("1" if exit else "3")
        print("\033[9{}m{}\033[0m".format(colour, msg), file=sys.stderr)
    if exit is not None:
        sys.exit(exit)
