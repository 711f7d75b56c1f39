#!/usr/bin/env python3
"""
Pydantic models for container statistics reported by `docker stats`
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator

from .parsing import parse_percentage


class MemoryStats(BaseModel):
    """Memory usage of a running container"""
    raw: str = Field(..., description="Usage / limit as printed by docker (e.g. '12MiB / 1GiB')")
    percent: str = Field(..., description="Memory usage percentage as printed by docker")


class IOStats(BaseModel):
    """Network and block IO of a running container"""
    network: str = Field(..., description="Network IO as printed by docker")
    block: str = Field(..., description="Block IO as printed by docker")


class ContainerStat(BaseModel):
    """Point-in-time statistics of one running container"""
    container: str = Field(..., description="Container ID")
    name: str = Field(..., description="Container name (service.slot.task for swarm tasks)")
    memory: MemoryStats
    cpu: str = Field(..., description="CPU usage percentage as printed by docker")
    io: IOStats
    pids: int = Field(..., ge=0, description="Number of processes")

    # Derived once when the record is parsed
    short_name: str = Field("", description="Container name up to the first '.'")
    cpu_percentage: Optional[float] = Field(None, description="Parsed CPU percentage, None if not a number")
    memory_percentage: Optional[float] = Field(None, description="Parsed memory percentage, None if not a number")

    @model_validator(mode="after")
    def derive_fields(self) -> "ContainerStat":
        self.short_name = self.name.split(".")[0]
        self.cpu_percentage = parse_percentage(self.cpu)
        self.memory_percentage = parse_percentage(self.memory.percent)
        return self

    def __str__(self) -> str:
        return (
            f"Container={self.container} Memory={{Raw={self.memory.raw} Percent={self.memory.percent}}} "
            f"CPU={self.cpu} IO={{Network={self.io.network} Block={self.io.block}}} PIDs={self.pids}"
        )
