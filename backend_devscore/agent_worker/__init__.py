"""
Agent worker — scheduled and on-demand dev score refresh.
"""

from backend_devscore.agent_worker.runner import (
    PeriodicRunnerConfig,
    get_stale_dev_ids,
    run_periodic_worker,
    update_all_dev_scores,
    update_stale_dev_scores,
)

__all__ = [
    "PeriodicRunnerConfig",
    "get_stale_dev_ids",
    "run_periodic_worker",
    "update_all_dev_scores",
    "update_stale_dev_scores",
]
