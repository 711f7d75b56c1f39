#!/usr/bin/env python3
"""
Pydantic models for the scaling signal sent to the decision endpoint
"""

import json
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field

from .service import Policy, ServiceDescriptor


class CurrentStats(BaseModel):
    """Observed state of a service"""
    model_config = ConfigDict(frozen=True)

    cpu_percentage: float = Field(..., description="Observed CPU percentage")
    memory_percentage: float = Field(..., description="Observed memory percentage")
    replicas: int = Field(..., ge=0, description="Declared replica count")


class BasedStats(BaseModel):
    """Policy state of a service; unset thresholds are sent as 0"""
    model_config = ConfigDict(frozen=True)

    cpu_percentage: float = Field(0.0, description="Target CPU percentage")
    memory_percentage: float = Field(0.0, description="Target memory percentage")
    min: int = Field(0, description="Minimum number of replicas")
    max: int = Field(0, description="Maximum number of replicas")

    @classmethod
    def from_policy(cls, policy: Policy) -> "BasedStats":
        return cls(
            cpu_percentage=policy.cpu_percentage or 0.0,
            memory_percentage=policy.memory_percentage or 0.0,
            min=policy.min_replicas or 0,
            max=policy.max_replicas or 0,
        )


class ScalingSignal(BaseModel):
    """Scaling signal for one service, built once per cycle"""
    model_config = ConfigDict(frozen=True)

    service_id: str
    service_name: str
    current: CurrentStats
    based: BasedStats

    @classmethod
    def build(
        cls,
        service: ServiceDescriptor,
        cpu_percentage: float,
        memory_percentage: float,
        replicas: int,
        policy: Policy,
    ) -> "ScalingSignal":
        return cls(
            service_id=service.service_id,
            service_name=service.name,
            current=CurrentStats(
                cpu_percentage=cpu_percentage,
                memory_percentage=memory_percentage,
                replicas=replicas,
            ),
            based=BasedStats.from_policy(policy),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation posted to the decision endpoint"""
        return self.model_dump()

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))


class CycleResult(BaseModel):
    """Outcome of one polling cycle"""
    services: int = Field(0, ge=0, description="Number of autoscale services listed")
    signals: List[ScalingSignal] = Field(default_factory=list, description="Signals handed to the dispatcher")
    skipped: Dict[str, int] = Field(default_factory=dict, description="Skipped services by reason")

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1
