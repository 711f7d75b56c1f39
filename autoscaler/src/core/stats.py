#!/usr/bin/env python3
"""
Stats collector module for gathering per-container resource usage
"""

import json
import logging
import subprocess
from typing import Dict, List, Optional

from pydantic import ValidationError

from models import ContainerStat
from .exceptions import CollectionError

logger = logging.getLogger(__name__)

# One JSON object per running container
STATS_FORMAT = (
    '{"container":"{{.Container}}","name":"{{.Name}}",'
    '"memory":{"raw":"{{.MemUsage}}","percent":"{{.MemPerc}}"},'
    '"cpu":"{{.CPUPerc}}",'
    '"io":{"network":"{{.NetIO}}","block":"{{.BlockIO}}"},'
    '"pids":{{.PIDs}}}'
)


def parse_stats_output(output: str) -> Dict[str, ContainerStat]:
    """
    Parse the line-delimited output of `docker stats`

    Args:
        output: Raw stdout of the statistics command

    Returns:
        Mapping of short container name to its stats. When two containers
        share a short name the later line wins.

    Raises:
        CollectionError: if any non-blank line is not a valid stats record
    """
    stats: Dict[str, ContainerStat] = {}

    for line_number, line in enumerate(output.splitlines(), start=1):
        if not line.strip():
            continue

        try:
            stat = ContainerStat.model_validate(json.loads(line))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            raise CollectionError(f"malformed stats record on line {line_number}: {e}") from e

        if stat.short_name in stats:
            logger.warning(
                f"Stats for {stat.name} replace {stats[stat.short_name].name} "
                f"under short name {stat.short_name}"
            )
        stats[stat.short_name] = stat

    return stats


class StatsCollector:
    """Takes a single `docker stats` snapshot of all running containers"""

    def __init__(self, docker_binary: str = "/usr/bin/docker", timeout: Optional[int] = None):
        """
        Initialize stats collector

        Args:
            docker_binary: Path of the docker CLI
            timeout: Seconds to wait for the CLI, None waits forever
        """
        self.docker_binary = docker_binary
        self.timeout = timeout

    @property
    def command(self) -> List[str]:
        return [self.docker_binary, "stats", "--no-stream", "--format", STATS_FORMAT]

    def collect(self) -> Dict[str, ContainerStat]:
        """
        Collect a fresh snapshot

        Returns:
            Mapping of short container name to ContainerStat

        Raises:
            CollectionError: if the CLI cannot be run or its output cannot be parsed
        """
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise CollectionError(f"docker stats exited with status {e.returncode}: {stderr}") from e
        except subprocess.TimeoutExpired as e:
            raise CollectionError(f"docker stats timed out after {self.timeout}s") from e
        except OSError as e:
            raise CollectionError(f"unable to run {self.docker_binary}: {e}") from e

        stats = parse_stats_output(result.stdout)
        logger.debug(f"Collected stats for {len(stats)} containers")
        return stats
