import logging
import threading
import unittest
from unittest.mock import call, Mock, patch

from svclib.plumbing.common import State
from svclib.plumbing.hosts import HostError, ServiceNotFound, ServiceStatus
from svclib.tasks import service
from svclib.tasks.outcome import Condition, Severity, StartRequest

from .plumbing import ScriptedHost


SLEEP = "{}.time.sleep".format(service.__spec__.name)

STRICT = StartRequest("svc")
LENIENT = StartRequest("svc", ignore_already_running=True, treat_unable_to_start_as_warning=True)


@patch(SLEEP)
class TestAlreadyRunning(unittest.TestCase):

    def test_ignored(self, sleep: Mock):
        for status in (ServiceStatus.running, ServiceStatus.start_pending):
            with self.subTest(status=status):
                host = ScriptedHost(status)
                result = service.start_service(host, LENIENT)
                self.assertEqual(result.value.condition, Condition.already_running)
                self.assertEqual(result.value.severity, Severity.info)
                self.assertEqual(host.starts, [])

    def test_error(self, sleep: Mock):
        for status in (ServiceStatus.running, ServiceStatus.start_pending):
            with self.subTest(status=status):
                host = ScriptedHost(status)
                result = service.start_service(host, STRICT)
                self.assertEqual(result.value.severity, Severity.error)
                self.assertEqual(host.starts, [])

    def test_unchanged(self, sleep: Mock):
        result = service.start_service(ScriptedHost(ServiceStatus.running), LENIENT)
        self.assertEqual(result.state, State.unchanged)
        self.assertEqual(result.parts, ())

    def test_idempotent(self, sleep: Mock):
        for request in (STRICT, LENIENT):
            with self.subTest(request=request):
                host = ScriptedHost(ServiceStatus.running, ServiceStatus.running)
                first = service.start_service(host, request).value
                second = service.start_service(host, request).value
                self.assertEqual(first, second)
                self.assertEqual(host.starts, [])

    def test_released(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.running)
        service.start_service(host, STRICT)
        self.assertEqual((host.opened, host.released), (1, 1))


@patch(SLEEP)
class TestStartFailed(unittest.TestCase):

    def host(self) -> ScriptedHost:
        return ScriptedHost(ServiceStatus.stopped, start_error=HostError("Access is denied."))

    def test_warning(self, sleep: Mock):
        outcome = service.start_service(self.host(), LENIENT).value
        self.assertEqual(outcome.condition, Condition.start_failed)
        self.assertEqual(outcome.severity, Severity.warning)
        self.assertIn("Access is denied.", outcome.message)

    def test_error(self, sleep: Mock):
        outcome = service.start_service(self.host(), STRICT).value
        self.assertEqual(outcome.severity, Severity.error)
        self.assertIn("Access is denied.", outcome.message)

    def test_no_poll(self, sleep: Mock):
        host = self.host()
        service.start_service(host, STRICT)
        self.assertEqual(host.probes, 1)
        self.assertEqual(host.released, 1)
        sleep.assert_not_called()


@patch(SLEEP)
class TestProbeFailed(unittest.TestCase):

    def test_initial(self, sleep: Mock):
        host = ScriptedHost(HostError("host unreachable"))
        outcome = service.start_service(host, LENIENT).value
        self.assertEqual(outcome.condition, Condition.probe_failed)
        self.assertEqual(outcome.severity, Severity.error)
        self.assertIn("host unreachable", outcome.message)
        self.assertEqual(host.starts, [])
        self.assertEqual(host.released, 1)

    def test_not_found(self, sleep: Mock):
        outcome = service.start_service(ScriptedHost(ServiceNotFound("svc")), STRICT).value
        self.assertEqual(outcome.condition, Condition.probe_failed)

    def test_while_polling(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending,
                            HostError("host unreachable"))
        outcome = service.start_service(host, LENIENT).value
        self.assertEqual(outcome.condition, Condition.probe_failed)
        self.assertEqual(outcome.severity, Severity.error)
        self.assertEqual(host.released, 1)


@patch(SLEEP)
class TestStarted(unittest.TestCase):

    def test_no_wait(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped)
        result = service.start_service(host, StartRequest("svc", wait=False))
        self.assertEqual(result.value.condition, Condition.start_ordered)
        self.assertEqual(result.value.severity, Severity.info)
        self.assertEqual(result.value.message, "Service ordered to start.")
        self.assertEqual(host.probes, 1)
        sleep.assert_not_called()

    def test_args(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped)
        service.start_service(host, StartRequest("svc", ["-v", "now"], wait=False))
        self.assertEqual(host.starts, [["-v", "now"]])

    def test_confirmed(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending,
                            ServiceStatus.start_pending, ServiceStatus.running)
        result = service.start_service(host, STRICT)
        self.assertEqual(result.value.condition, Condition.started)
        self.assertEqual(result.value.severity, Severity.info)
        # One initial check, then three while waiting.
        self.assertEqual(host.probes, 4)
        self.assertEqual(sleep.call_args_list, [call(3), call(3)])

    def test_other_pending_states(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.paused, ServiceStatus.unknown,
                            ServiceStatus.stop_pending, ServiceStatus.running)
        outcome = service.start_service(host, STRICT).value
        self.assertEqual(outcome.condition, Condition.started)
        self.assertEqual(host.starts, [[]])

    def test_changed(self, sleep: Mock):
        result = service.start_service(ScriptedHost(ServiceStatus.stopped, ServiceStatus.running),
                                       STRICT)
        self.assertEqual(result.state, State.success)
        self.assertEqual(result.caller, "svclib.tasks.service:start_service")
        self.assertEqual(result.parts[0].caller, "svclib.plumbing.services:start")

    def test_stopped_warning(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending,
                            ServiceStatus.stopped)
        outcome = service.start_service(host, LENIENT).value
        self.assertEqual(outcome.condition, Condition.stopped_after_start)
        self.assertEqual(outcome.severity, Severity.warning)
        self.assertEqual(sleep.call_count, 1)

    def test_stopped_error(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending,
                            ServiceStatus.stopped)
        outcome = service.start_service(host, STRICT).value
        self.assertEqual(outcome.severity, Severity.error)
        self.assertEqual(outcome.message, "Service stopped immediately after starting.")

    def test_simulate(self, sleep: Mock):
        host = ScriptedHost()
        outcome = service.start_service(host, STRICT, simulate=True).value
        self.assertEqual(outcome.condition, Condition.simulated)
        self.assertEqual(outcome.severity, Severity.info)
        self.assertEqual(host.opened, 0)

    def test_logs(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending,
                            ServiceStatus.running)
        request = StartRequest.from_options({"SERVICE": "HDARS", "ARG": [], "--no-wait": False,
                                             "--ignore-running": False, "--warn": False,
                                             "--timeout": None})
        with self.assertLogs(service.__spec__.name, logging.INFO) as logs:
            result = service.start_service(host, request)
        self.assertEqual(logs.output, [
            "INFO:svclib.tasks.service:Starting service HDARS...",
            "INFO:svclib.tasks.service:Waiting for service to start...",
            "INFO:svclib.tasks.service:Service started.",
        ])
        self.assertEqual(result.value.severity, Severity.info)
        self.assertEqual(host.released, 1)

    def test_logs_severity(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.running)
        with self.assertLogs(service.__spec__.name, logging.INFO) as logs:
            service.start_service(host, STRICT)
        self.assertEqual(logs.output[-1], "ERROR:svclib.tasks.service:Service is already running.")


class TestWaitForRunning(unittest.TestCase):

    @patch(SLEEP)
    @patch("{}.time.monotonic".format(service.__spec__.name))
    def test_timeout(self, monotonic: Mock, sleep: Mock):
        monotonic.side_effect = [0, 1, 5]
        host = ScriptedHost(ServiceStatus.start_pending, ServiceStatus.start_pending)
        with host.open("svc") as handle:
            condition, _ = service.wait_for_running(handle, timeout=4)
        self.assertEqual(condition, Condition.timed_out)
        self.assertEqual(host.probes, 2)
        self.assertEqual(sleep.call_count, 1)

    @patch(SLEEP)
    @patch("{}.time.monotonic".format(service.__spec__.name))
    def test_timeout_outcome(self, monotonic: Mock, sleep: Mock):
        monotonic.side_effect = [0, 10]
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending)
        outcome = service.start_service(host, StartRequest("svc", timeout=5,
                                                           treat_unable_to_start_as_warning=True)).value
        self.assertEqual(outcome.condition, Condition.timed_out)
        self.assertEqual(outcome.severity, Severity.warning)
        self.assertEqual(outcome.message, "Service did not start within 5 seconds.")

    def test_cancelled(self):
        cancel = threading.Event()
        cancel.set()
        host = ScriptedHost(ServiceStatus.start_pending)
        with host.open("svc") as handle:
            condition, _ = service.wait_for_running(handle, cancel=cancel)
        self.assertEqual(condition, Condition.cancelled)
        self.assertEqual(host.probes, 1)

    @patch.object(service, "POLL_INTERVAL", 0)
    def test_not_cancelled(self):
        host = ScriptedHost(ServiceStatus.start_pending, ServiceStatus.running)
        with host.open("svc") as handle:
            condition, _ = service.wait_for_running(handle, cancel=threading.Event())
        self.assertEqual(condition, Condition.started)

    def test_cancelled_outcome(self):
        cancel = threading.Event()
        cancel.set()
        host = ScriptedHost(ServiceStatus.stopped, ServiceStatus.start_pending)
        outcome = service.start_service(host, STRICT, cancel=cancel).value
        self.assertEqual(outcome.condition, Condition.cancelled)
        self.assertEqual(outcome.severity, Severity.warning)
        self.assertEqual(host.released, 1)

    @patch(SLEEP)
    def test_running_first(self, sleep: Mock):
        host = ScriptedHost(ServiceStatus.running)
        with host.open("svc") as handle:
            self.assertEqual(service.wait_for_running(handle), (Condition.started, None))
        sleep.assert_not_called()


if __name__ == "__main__":
    unittest.main()
