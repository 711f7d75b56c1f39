#!/usr/bin/env python3
"""
Dispatcher module for delivering scaling signals to the decision endpoint
"""

import concurrent.futures
import logging
import threading
import time
from typing import Optional

import requests

from models import ScalingSignal
from .exceptions import DispatchError
from .pipeline_metrics import DISPATCH_TOTAL, DISPATCH_DURATION, DISPATCH_IN_FLIGHT

logger = logging.getLogger(__name__)


def send_stats(
    signal: ScalingSignal,
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> None:
    """
    POST a scaling signal once, without retry

    Args:
        signal: Signal to deliver
        url: Full endpoint URL
        session: HTTP session to reuse, a one-off request is made when None
        timeout: Request timeout in seconds, None waits forever

    Raises:
        DispatchError: on transport failure or any status outside 200-299
    """
    http = session or requests
    try:
        response = http.post(
            url,
            data=signal.to_json(),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise DispatchError(None, str(e)) from e

    if 200 <= response.status_code < 300:
        return

    raise DispatchError(response.status_code, response.reason or "", response.text)


class StatsDispatcher:
    """
    Delivers scaling signals in the background on a bounded thread pool.

    At most `max_pending` signals are queued or in flight; further signals are
    dropped until a slot frees up. Failures are logged and never reach the
    caller.
    """

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = None,
        max_workers: int = 4,
        max_pending: int = 100,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.max_pending = max_pending
        self.session = session or requests.Session()

        self.thread_pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="stats-dispatch"
        )
        self._slots = threading.BoundedSemaphore(max_pending)

        logger.info(f"StatsDispatcher initialized: url={url}, workers={max_workers}, max_pending={max_pending}")

    def submit(self, signal: ScalingSignal) -> bool:
        """
        Queue a signal for delivery without waiting for it

        Returns:
            True if the signal was queued, False if it was dropped
        """
        if not self._slots.acquire(blocking=False):
            logger.warning(
                f"Dropping stats for {signal.service_name}: "
                f"{self.max_pending} dispatches already pending"
            )
            DISPATCH_TOTAL.labels(status="dropped").inc()
            return False

        DISPATCH_IN_FLIGHT.inc()
        try:
            future = self.thread_pool.submit(self._deliver, signal)
        except RuntimeError:
            # Pool already shut down
            self._release()
            logger.warning(f"Dropping stats for {signal.service_name}: dispatcher is shut down")
            DISPATCH_TOTAL.labels(status="dropped").inc()
            return False

        future.add_done_callback(self._on_done)
        return True

    def _deliver(self, signal: ScalingSignal) -> bool:
        start = time.monotonic()
        try:
            send_stats(signal, self.url, session=self.session, timeout=self.timeout)
        except DispatchError as e:
            logger.error(f"Unable to send stats for {signal.service_name}: {e}")
            DISPATCH_TOTAL.labels(status="error").inc()
            return False
        finally:
            DISPATCH_DURATION.observe(time.monotonic() - start)

        logger.debug(f"Sent stats for {signal.service_name}")
        DISPATCH_TOTAL.labels(status="success").inc()
        return True

    def _on_done(self, future: concurrent.futures.Future) -> None:
        self._release()
        if not future.cancelled() and future.exception() is not None:
            logger.error(f"Unexpected error while sending stats: {future.exception()}")
            DISPATCH_TOTAL.labels(status="error").inc()

    def _release(self) -> None:
        DISPATCH_IN_FLIGHT.dec()
        self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting signals

        Args:
            wait: Drain pending dispatches before returning; when False they are cancelled
                and the session is left open for deliveries still running
        """
        logger.info("Shutting down stats dispatcher...")
        self.thread_pool.shutdown(wait=wait, cancel_futures=not wait)
        if wait:
            self.session.close()
