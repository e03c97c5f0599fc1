"""Check synchronizer engine — keep GitHub check runs in step with analysis runs."""

from pkgcheck.engines.check_sync.models import CheckSuiteTrigger, RunOutcome
from pkgcheck.engines.check_sync.pending import InMemoryPendingCheckStore, PendingCheckStore
from pkgcheck.engines.check_sync.retry import RetryPolicy
from pkgcheck.engines.check_sync.synchronizer import CheckSynchronizer
from pkgcheck.engines.check_sync.worker import CheckWorker, report_outcomes

__all__ = [
    "CheckSuiteTrigger",
    "CheckSynchronizer",
    "CheckWorker",
    "InMemoryPendingCheckStore",
    "PendingCheckStore",
    "RetryPolicy",
    "RunOutcome",
    "report_outcomes",
]
