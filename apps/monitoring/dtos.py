"""DTOs for Monitoring app."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class SyncExecutionDTO:
    id: int
    kind: str
    status: str
    sync_type: str
    processed: int
    updated: int
    failures: int
    price_changes: int
    batch_size: int
    duration_ms: int
    error: str
    error_details: list
    timestamp: datetime


@dataclass(frozen=True)
class SyncHealthDTO:
    enabled: bool
    last_execution: Optional[datetime]
    total_runs: int
    success_rate: Optional[float]  # percent over the last 10 runs
    avg_duration_ms: Optional[int]  # over the last 10 runs
    overdue: bool
    recent_runs: List[SyncExecutionDTO]  # last 5, oldest first


@dataclass(frozen=True)
class SystemHealthDTO:
    timestamp: datetime
    uptime_seconds: int
    warnings: List[str]


@dataclass(frozen=True)
class SchedulerHealthDTO:
    inventory_sync: SyncHealthDTO
    price_sync: SyncHealthDTO
    system: SystemHealthDTO
