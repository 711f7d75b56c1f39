#!/usr/bin/env python3
"""
Swarm Autoscaler - Main Entry Point
Polls swarm services labeled for autoscaling, correlates them with container
stats and forwards scaling signals to the decision endpoint
"""

import os
import sys
import signal
import threading
from typing import Optional
from prometheus_client import start_http_server

from core.logging_config import setup_logging, get_logger
from core import (
    PolicyExtractor,
    ServiceEnumerator,
    StatsCollector,
    StatsDispatcher,
    StatsPipeline,
    connect_docker,
)
from core.exceptions import AutoscalerError, OrchestratorUnavailableError
from core.pipeline_metrics import CYCLES_TOTAL
from config import Settings


class AutoscalerService:
    """Main service that owns the clients and runs the polling loop"""

    def __init__(self, settings: Settings, docker_client=None):
        """
        Initialize the service

        Args:
            settings: Loaded settings
            docker_client: Pre-built Docker client, one is connected when None

        Raises:
            OrchestratorUnavailableError: if the Docker engine cannot be reached
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self._stop = threading.Event()

        self.docker_client = docker_client or connect_docker(
            api_version=settings.docker.api_version,
            base_url=settings.docker.base_url,
        )

        self.dispatcher = StatsDispatcher(
            url=settings.dispatch.url,
            timeout=settings.dispatch.timeout,
            max_workers=settings.dispatch.workers,
            max_pending=settings.dispatch.max_pending,
        )
        self.pipeline = StatsPipeline(
            enumerator=ServiceEnumerator(self.docker_client),
            collector=StatsCollector(
                docker_binary=settings.docker.binary,
                timeout=settings.docker.stats_timeout,
            ),
            dispatcher=self.dispatcher,
            extractor=PolicyExtractor(),
        )

        self.logger.info("Swarm Autoscaler Service initialized")
        if settings.debug:
            self.logger.info(f"Debug mode enabled. Settings: {settings.get_config_dict()}")

    @property
    def running(self) -> bool:
        return not self._stop.is_set()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        self.logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def stop(self):
        self._stop.set()

    def run_once(self) -> bool:
        """
        Run a single cycle, logging instead of raising

        Returns:
            True if the cycle completed
        """
        try:
            self.pipeline.run_cycle()
        except AutoscalerError as e:
            self.logger.error(f"Cycle aborted: {e}")
            CYCLES_TOTAL.labels(status=type(e).__name__).inc()
            return False
        except Exception as e:
            self.logger.error(f"Unexpected error in polling cycle: {e}", exc_info=True)
            CYCLES_TOTAL.labels(status="unexpected").inc()
            return False

        CYCLES_TOTAL.labels(status="success").inc()
        return True

    def run(self):
        """Main run loop"""
        interval = self.settings.scheduler.schedule_at
        self.logger.info(f"Starting polling loop with {interval}s interval")

        while self.running:
            self.run_once()
            # Sleep until next cycle, wakes up early on shutdown
            self._stop.wait(interval)

        self.logger.info("Swarm Autoscaler Service stopped")

    def cleanup(self):
        """Drain pending dispatches and close clients"""
        try:
            self.dispatcher.shutdown(wait=True)
            self.docker_client.close()
            self.logger.info("Cleanup completed")
        except Exception as e:
            self.logger.error(f"Error during cleanup: {e}")


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.load_from_yaml_with_env_override(config_path)
    return Settings()


def main(argv=None):
    """Entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Swarm Autoscaler stats forwarder')
    parser.add_argument(
        '--config',
        default=os.getenv('CONFIG_PATH'),
        help='Path to an optional YAML configuration file'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single polling cycle and exit'
    )

    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.file,
        json_output=settings.logging.json_output,
    )
    logger = get_logger(__name__)

    try:
        service = AutoscalerService(settings)
    except OrchestratorUnavailableError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    try:
        if args.once:
            ok = service.run_once()
            if not ok:
                sys.exit(1)
            return

        if settings.metrics.port:
            start_http_server(settings.metrics.port)
            logger.info(f"Prometheus metrics server started on :{settings.metrics.port}")

        service.install_signal_handlers()
        service.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    finally:
        service.cleanup()


if __name__ == "__main__":
    main()
