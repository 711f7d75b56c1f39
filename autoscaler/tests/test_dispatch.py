"""
Tests for scaling signal delivery
"""

import json
import threading
from unittest.mock import Mock

import pytest
import requests

from core.dispatch import StatsDispatcher, send_stats
from core.exceptions import DispatchError
from models import Policy, ScalingSignal, ServiceDescriptor

URL = "http://decider:2441/api/stats"


@pytest.fixture
def signal():
    service = ServiceDescriptor(service_id="svc1", name="api", running_tasks=1, replicas=3)
    return ScalingSignal.build(
        service,
        cpu_percentage=45.2,
        memory_percentage=30.1,
        replicas=3,
        policy=Policy(cpu_percentage=70.0, min_replicas=2, max_replicas=10),
    )


class TestSendStats:
    """Test the single POST"""

    def test_posts_json_payload(self, signal, http_session):
        send_stats(signal, URL, session=http_session, timeout=5)

        http_session.post.assert_called_once()
        args, kwargs = http_session.post.call_args
        assert args == (URL,)
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert kwargs["timeout"] == 5
        assert json.loads(kwargs["data"]) == {
            "service_id": "svc1",
            "service_name": "api",
            "current": {"cpu_percentage": 45.2, "memory_percentage": 30.1, "replicas": 3},
            "based": {"cpu_percentage": 70.0, "memory_percentage": 0.0, "min": 2, "max": 10},
        }

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_any_2xx_is_success(self, signal, http_session, status):
        http_session.post.return_value = Mock(status_code=status, reason="", text="")

        send_stats(signal, URL, session=http_session)

    @pytest.mark.parametrize("status", [199, 300, 404, 500])
    def test_non_2xx_is_error(self, signal, http_session, status):
        http_session.post.return_value = Mock(status_code=status, reason="Nope", text="body")

        with pytest.raises(DispatchError) as exc_info:
            send_stats(signal, URL, session=http_session)

        assert exc_info.value.status_code == status

    def test_error_carries_status_and_body(self, signal, http_session):
        http_session.post.return_value = Mock(status_code=503, reason="Service Unavailable", text="overloaded")

        with pytest.raises(DispatchError) as exc_info:
            send_stats(signal, URL, session=http_session)

        message = str(exc_info.value)
        assert "503" in message
        assert "Service Unavailable" in message
        assert "overloaded" in message
        assert exc_info.value.body == "overloaded"

    def test_transport_failure(self, signal, http_session):
        http_session.post.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(DispatchError) as exc_info:
            send_stats(signal, URL, session=http_session)

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)


class TestStatsDispatcher:
    """Test background delivery"""

    def test_submit_delivers_in_background(self, signal, http_session):
        dispatcher = StatsDispatcher(URL, timeout=5, max_workers=2, session=http_session)

        assert dispatcher.submit(signal) is True
        dispatcher.shutdown(wait=True)

        http_session.post.assert_called_once()
        http_session.close.assert_called_once()

    def test_failure_is_logged_not_raised(self, signal, http_session, caplog):
        """Test that a 503 is only logged, with status and body"""
        http_session.post.return_value = Mock(status_code=503, reason="Service Unavailable", text="overloaded")
        dispatcher = StatsDispatcher(URL, session=http_session)

        assert dispatcher.submit(signal) is True
        dispatcher.shutdown(wait=True)

        errors = [r.getMessage() for r in caplog.records if r.levelname == "ERROR"]
        assert len(errors) == 1
        assert "503" in errors[0]
        assert "overloaded" in errors[0]

    def test_drops_when_pending_limit_reached(self, signal, http_session):
        release = threading.Event()
        started = threading.Event()

        def slow_post(*args, **kwargs):
            started.set()
            release.wait(5)
            return Mock(status_code=200, reason="OK", text="")

        http_session.post.side_effect = slow_post
        dispatcher = StatsDispatcher(URL, max_workers=1, max_pending=1, session=http_session)

        assert dispatcher.submit(signal) is True
        assert started.wait(5)
        assert dispatcher.submit(signal) is False

        release.set()
        dispatcher.shutdown(wait=True)
        assert http_session.post.call_count == 1

    def test_slot_freed_after_delivery(self, signal, http_session):
        dispatcher = StatsDispatcher(URL, max_workers=1, max_pending=1, session=http_session)

        assert dispatcher.submit(signal) is True
        dispatcher.thread_pool.submit(lambda: None).result(timeout=5)
        # The done callback of the first delivery has run once the next task completes
        assert dispatcher.submit(signal) is True

        dispatcher.shutdown(wait=True)
        assert http_session.post.call_count == 2

    def test_submit_after_shutdown_is_dropped(self, signal, http_session):
        dispatcher = StatsDispatcher(URL, session=http_session)
        dispatcher.shutdown(wait=True)

        assert dispatcher.submit(signal) is False
        http_session.post.assert_not_called()

    def test_shutdown_without_wait_keeps_session_open(self, signal, http_session):
        """Test that a running delivery can still use the session after a non-waiting shutdown"""
        release = threading.Event()
        started = threading.Event()

        def slow_post(*args, **kwargs):
            started.set()
            release.wait(5)
            return Mock(status_code=200)

        http_session.post.side_effect = slow_post
        dispatcher = StatsDispatcher(URL, max_workers=1, session=http_session)

        assert dispatcher.submit(signal) is True
        assert started.wait(5)
        dispatcher.shutdown(wait=False)

        http_session.close.assert_not_called()

        release.set()
        dispatcher.thread_pool.shutdown(wait=True)
        http_session.post.assert_called_once()
