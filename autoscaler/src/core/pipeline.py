#!/usr/bin/env python3
"""
Stats pipeline module: correlates service policy with container stats
and hands the resulting scaling signals to the dispatcher
"""

import logging
import time
from typing import Dict, Optional, Tuple

from models import ContainerStat, CycleResult, ScalingSignal, ServiceDescriptor
from .dispatch import StatsDispatcher
from .exceptions import MetricParseError, PolicyParseError
from .pipeline_metrics import (
    CYCLE_DURATION,
    SERVICES_SEEN,
    SERVICES_SKIPPED_TOTAL,
    SIGNALS_BUILT_TOTAL,
)
from .policy import PolicyExtractor
from .services import ServiceEnumerator
from .stats import StatsCollector

logger = logging.getLogger(__name__)

SKIP_NO_RUNNING_TASKS = "no_running_tasks"
SKIP_NO_STATS = "no_stats"
SKIP_METRIC_PARSE = "metric_parse"
SKIP_POLICY_PARSE = "policy_parse"
SKIP_MISSING_REPLICAS = "missing_replicas"


def observed_percentages(stats: ContainerStat) -> Tuple[float, float]:
    """
    Return the parsed CPU and memory percentages of a stats record

    Raises:
        MetricParseError: if either value reported by docker is not a number
    """
    if stats.cpu_percentage is None:
        raise MetricParseError("cpu", stats.cpu)
    if stats.memory_percentage is None:
        raise MetricParseError("memory", stats.memory.percent)
    return stats.cpu_percentage, stats.memory_percentage


class StatsPipeline:
    """Runs one enumerate -> collect -> correlate -> dispatch cycle at a time"""

    def __init__(
        self,
        enumerator: ServiceEnumerator,
        collector: StatsCollector,
        dispatcher: StatsDispatcher,
        extractor: Optional[PolicyExtractor] = None,
    ):
        """
        Initialize the pipeline

        Args:
            enumerator: Lists autoscale-enabled services
            collector: Takes container stats snapshots
            dispatcher: Delivers signals in the background
            extractor: Reads policy from service labels
        """
        self.enumerator = enumerator
        self.collector = collector
        self.dispatcher = dispatcher
        self.extractor = extractor or PolicyExtractor()

    def run_cycle(self) -> CycleResult:
        """
        Run a complete polling cycle

        Returns:
            CycleResult with the dispatched signals and skip counts

        Raises:
            DiscoveryError: if services cannot be listed
            CollectionError: if container stats cannot be collected
        """
        start = time.monotonic()
        try:
            return self._run_cycle()
        finally:
            CYCLE_DURATION.observe(time.monotonic() - start)

    def _run_cycle(self) -> CycleResult:
        services = self.enumerator.list_autoscale_services()
        SERVICES_SEEN.set(len(services))
        result = CycleResult(services=len(services))

        # Taken once, on first use, so every service sees the same instant
        snapshot: Optional[Dict[str, ContainerStat]] = None

        for service in services:
            if service.running_tasks == 0:
                logger.warning(f"service {service.name} has no running tasks")
                self._skip(result, SKIP_NO_RUNNING_TASKS)
                continue

            if snapshot is None:
                snapshot = self.collector.collect()

            signal = self._correlate(service, snapshot, result)
            if signal is None:
                continue

            SIGNALS_BUILT_TOTAL.inc()
            result.signals.append(signal)
            self.dispatcher.submit(signal)

        logger.info(
            f"Cycle complete: {result.services} services, "
            f"{len(result.signals)} signals, skipped={result.skipped}"
        )
        return result

    def _correlate(
        self,
        service: ServiceDescriptor,
        snapshot: Dict[str, ContainerStat],
        result: CycleResult,
    ) -> Optional[ScalingSignal]:
        """Build the signal for one service, or record why it was skipped"""
        stats = snapshot.get(service.name)
        if stats is None:
            logger.debug(f"No stats reported for service {service.name}")
            self._skip(result, SKIP_NO_STATS)
            return None

        logger.info(
            f"stats: service={service.name} CPU={stats.cpu} Memory={stats.memory.percent}"
        )

        try:
            cpu_percentage, memory_percentage = observed_percentages(stats)
        except MetricParseError as e:
            logger.error(f"parse metrics of {service.name}: {e}")
            self._skip(result, SKIP_METRIC_PARSE)
            return None

        try:
            policy = self.extractor.extract(service.labels)
        except PolicyParseError as e:
            logger.error(f"parse policy of {service.name}: {e}")
            self._skip(result, SKIP_POLICY_PARSE)
            return None

        if service.replicas is None:
            logger.error(f"service {service.name} has no replicated replica count")
            self._skip(result, SKIP_MISSING_REPLICAS)
            return None

        return ScalingSignal.build(
            service,
            cpu_percentage=cpu_percentage,
            memory_percentage=memory_percentage,
            replicas=service.replicas,
            policy=policy,
        )

    @staticmethod
    def _skip(result: CycleResult, reason: str) -> None:
        result.skip(reason)
        SERVICES_SKIPPED_TOTAL.labels(reason=reason).inc()
