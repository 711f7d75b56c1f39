#!/usr/bin/env python3
"""
Pipeline Metrics for Prometheus
Track polling cycles, skipped services and dispatch outcomes
"""

from prometheus_client import Counter, Histogram, Gauge

CYCLES_TOTAL = Counter(
    'autoscaler_cycles_total',
    'Total polling cycles',
    ['status']  # 'success' or the error type that aborted the cycle
)

CYCLE_DURATION = Histogram(
    'autoscaler_cycle_duration_seconds',
    'Time taken by the synchronous part of a polling cycle',
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

SERVICES_SEEN = Gauge(
    'autoscaler_services',
    'Autoscale-enabled services listed in the last cycle'
)

SIGNALS_BUILT_TOTAL = Counter(
    'autoscaler_signals_total',
    'Scaling signals built and handed to the dispatcher'
)

SERVICES_SKIPPED_TOTAL = Counter(
    'autoscaler_services_skipped_total',
    'Services skipped during a cycle',
    ['reason']
)

DISPATCH_TOTAL = Counter(
    'autoscaler_dispatch_total',
    'Scaling signal deliveries',
    ['status']  # 'success', 'error' or 'dropped'
)

DISPATCH_DURATION = Histogram(
    'autoscaler_dispatch_duration_seconds',
    'Time taken to POST a scaling signal',
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

DISPATCH_IN_FLIGHT = Gauge(
    'autoscaler_dispatch_in_flight',
    'Scaling signals queued or being delivered'
)
