"""
Shared fixtures for the autoscaler tests
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, Mock

import pytest


class MockDockerClient:
    """Mock Docker client exposing the low-level services call"""

    def __init__(self):
        self.service_docs: List[Dict[str, Any]] = []
        self.api = Mock()
        self.api.services.side_effect = lambda **kwargs: list(self.service_docs)
        self.close = Mock()

    def add_service(
        self,
        name: str,
        running_tasks: int = 1,
        replicas: Optional[int] = 3,
        labels: Optional[Dict[str, str]] = None,
        service_id: Optional[str] = None,
        global_mode: bool = False,
    ) -> Dict[str, Any]:
        """Helper to add a raw service document as returned by the engine API"""
        mode = {"Global": {}} if global_mode else {"Replicated": {"Replicas": replicas}}
        doc = {
            "ID": service_id or f"{name}-id",
            "Spec": {
                "Name": name,
                "Labels": {"swarm.autoscale": "true", **(labels or {})},
                "Mode": mode,
            },
            "ServiceStatus": {"RunningTasks": running_tasks, "DesiredTasks": replicas or 0},
        }
        self.service_docs.append(doc)
        return doc


def make_stats_line(
    name: str,
    cpu: str = "10.00%",
    mem: str = "20.00%",
    container: str = "0123456789ab",
    pids: int = 4,
) -> str:
    """One line of `docker stats --format` output"""
    return json.dumps({
        "container": container,
        "name": name,
        "memory": {"raw": "12.5MiB / 1.944GiB", "percent": mem},
        "cpu": cpu,
        "io": {"network": "1.2kB / 648B", "block": "0B / 0B"},
        "pids": pids,
    })


@pytest.fixture
def docker_client():
    return MockDockerClient()


@pytest.fixture
def stats_line():
    return make_stats_line


@pytest.fixture
def dispatcher():
    """Dispatcher double that records submitted signals"""
    mock_dispatcher = MagicMock()
    mock_dispatcher.submit.return_value = True
    return mock_dispatcher


@pytest.fixture
def http_session():
    """requests.Session double answering 200 by default"""
    session = Mock()
    session.post.return_value = Mock(status_code=200, reason="OK", text="")
    return session
