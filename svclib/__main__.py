import code
import logging

from svclib import describe, plumbing as p
from svclib.plumbing.common import *
from svclib.plumbing.hosts import get_host, ServiceStatus
from svclib.plumbing.services import probe_status, start
from svclib.tasks.outcome import Condition, Outcome, Severity, StartRequest
from svclib.tasks.service import start_service, wait_for_running


host = get_host()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    code.interact(local=globals())
