"""
Exception classes for the stats pipeline.

Cycle-level failures (the whole cycle is aborted and retried next time):
- DiscoveryError: the orchestrator could not list services
- CollectionError: the statistics source failed or produced garbage

Service-level failures (the service is skipped for this cycle):
- PolicyParseError: a policy label holds a malformed number
- MetricParseError: a container stat holds a malformed percentage

Dispatch failures never reach the cycle:
- DispatchError: the downstream endpoint refused or could not be reached
"""

from typing import Optional


class AutoscalerError(Exception):
    """Base class for every error raised by the autoscaler"""


class DiscoveryError(AutoscalerError):
    """Raised when autoscale-enabled services cannot be listed"""


class OrchestratorUnavailableError(DiscoveryError):
    """Raised when the Docker client cannot be constructed or reached at startup"""


class CollectionError(AutoscalerError):
    """Raised when container statistics cannot be collected"""


class PolicyParseError(AutoscalerError):
    """
    Raised when a policy label value is not a valid number.

    Attributes:
        field: Label key holding the malformed value
        value: The raw label value
    """

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"invalid value for {field}: {value!r}")


class MetricParseError(AutoscalerError):
    """
    Raised when a container metric cannot be read as a percentage.

    Attributes:
        field: Metric name (cpu, memory)
        value: The raw value reported by the statistics source
    """

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"invalid {field} percentage: {value!r}")


class DispatchError(AutoscalerError):
    """
    Raised when a scaling signal could not be delivered.

    Attributes:
        status_code: HTTP status returned by the endpoint, None on transport failure
        reason: HTTP status text or transport error description
        body: Raw response body, empty on transport failure
    """

    def __init__(self, status_code: Optional[int], reason: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        if status_code is None:
            message = f"unable to send stats: {reason}"
        else:
            message = f"unable to send stats ({status_code} {reason}): {body}"
        super().__init__(message)
