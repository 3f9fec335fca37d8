"""
Human-readable summaries of service requests, for confirmation prompts and pipeline logs.

Templates placed inside the `templates` directory of this module receive the request as `request`,
and may use the `quote_args` filter to join startup arguments for display.
"""

import os.path
import shlex

from jinja2 import Environment, FileSystemLoader

from ..tasks.outcome import StartRequest


ENV = Environment(loader=FileSystemLoader(os.path.join(os.path.dirname(__file__), "templates")),
                  trim_blocks=True, lstrip_blocks=True)

ENV.filters.update({"quote_args": lambda args: " ".join(shlex.quote(arg) for arg in args)})


def render(template: str, request: StartRequest) -> str:
    """
    Render a description template, without any surrounding whitespace.

    Templates are responsible for keeping their output on one line, using whitespace control
    (`{%-`) between blocks, so that quoted arguments are displayed exactly as given.
    """
    return ENV.get_template(template).render(request=request).strip()


def describe(request: StartRequest) -> str:
    """
    Summarise what starting this request will do, e.g. `Start 'nginx' service`.
    """
    return render("request.j2", request)
