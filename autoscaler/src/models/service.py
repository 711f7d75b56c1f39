#!/usr/bin/env python3
"""
Pydantic models for swarm services and their autoscale policy
"""

from typing import Dict, Optional
from pydantic import BaseModel, Field


class ServiceDescriptor(BaseModel):
    """A swarm service opted into autoscaling, as seen during one cycle"""
    service_id: str = Field(..., description="Swarm service ID")
    name: str = Field(..., description="Declared service name")
    running_tasks: int = Field(0, ge=0, description="Number of running tasks")
    replicas: Optional[int] = Field(None, ge=0, description="Declared replica count, None outside replicated mode")
    labels: Dict[str, str] = Field(default_factory=dict, description="Service labels")


class Policy(BaseModel):
    """Operator-declared scaling thresholds; None means the label was not set"""
    cpu_percentage: Optional[float] = Field(None, description="Target CPU percentage")
    memory_percentage: Optional[float] = Field(None, description="Target memory percentage")
    min_replicas: Optional[int] = Field(None, description="Minimum number of replicas")
    max_replicas: Optional[int] = Field(None, description="Maximum number of replicas")

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.cpu_percentage, self.memory_percentage, self.min_replicas, self.max_replicas)
        )
