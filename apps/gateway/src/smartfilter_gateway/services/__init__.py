"""Gateway services."""

from .bridge import BridgeState, FilterJob, WorkerBridge, run_job

__all__ = ["BridgeState", "FilterJob", "WorkerBridge", "run_job"]
