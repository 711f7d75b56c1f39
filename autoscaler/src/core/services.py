#!/usr/bin/env python3
"""
Service enumerator module for listing autoscale-enabled swarm services
"""

import logging
from typing import Any, Dict, List, Optional

import docker
import requests
from docker.errors import DockerException

from models import ServiceDescriptor
from .exceptions import DiscoveryError, OrchestratorUnavailableError
from .policy import LABEL_AUTOSCALE_FILTER

logger = logging.getLogger(__name__)


def connect_docker(api_version: str = "1.44", base_url: Optional[str] = None) -> docker.DockerClient:
    """
    Create a Docker client and make sure the engine answers

    Args:
        api_version: Engine API version to pin
        base_url: Engine URL, the environment (DOCKER_HOST) is used when None

    Raises:
        OrchestratorUnavailableError: if the client cannot be created or pinged
    """
    try:
        if base_url:
            client = docker.DockerClient(base_url=base_url, version=api_version)
        else:
            client = docker.from_env(version=api_version)
        client.ping()
    except (DockerException, requests.exceptions.RequestException) as e:
        raise OrchestratorUnavailableError(f"unable to connect to docker: {e}") from e

    logger.info(f"Docker client initialized (API {api_version})")
    return client


def to_descriptor(service: Dict[str, Any]) -> ServiceDescriptor:
    """Map a raw service document from the engine API to a ServiceDescriptor"""
    spec = service.get("Spec") or {}
    status = service.get("ServiceStatus") or {}
    replicated = (spec.get("Mode") or {}).get("Replicated") or {}

    return ServiceDescriptor(
        service_id=service.get("ID", ""),
        name=spec.get("Name", ""),
        running_tasks=status.get("RunningTasks") or 0,
        replicas=replicated.get("Replicas"),
        labels=spec.get("Labels") or {},
    )


class ServiceEnumerator:
    """Lists swarm services carrying the autoscale marker label"""

    def __init__(self, docker_client: docker.DockerClient):
        """
        Initialize service enumerator

        Args:
            docker_client: Long-lived Docker client shared by every cycle
        """
        self.docker_client = docker_client

    def list_autoscale_services(self) -> List[ServiceDescriptor]:
        """
        List services opted into autoscaling, with their running task count

        Raises:
            DiscoveryError: if the engine cannot be queried
        """
        try:
            services = self.docker_client.api.services(
                filters={"label": LABEL_AUTOSCALE_FILTER},
                status=True,
            )
        except (DockerException, requests.exceptions.RequestException) as e:
            raise DiscoveryError(f"unable to list services: {e}") from e

        descriptors = [to_descriptor(service) for service in services]
        logger.debug(f"Found {len(descriptors)} autoscale services")
        return descriptors
