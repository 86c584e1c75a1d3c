# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics, single source of truth for all metric objects.
Updated by the service layer only.
"""

from prometheus_client import Counter, Gauge

PROPOSALS_TOTAL = Counter(
    "allocation_proposals_total",
    "Total assignment proposals and pending updates",
    ["operation", "outcome"],
)
REJECTIONS_TOTAL = Counter(
    "allocation_rejections_total",
    "Total rejected proposals, updates and commits by error code",
    ["code"],
)
ASSIGNMENTS_COMMITTED = Counter(
    "allocation_assignments_committed_total",
    "Total assignments committed",
)
STALE_COMMITS = Counter(
    "allocation_stale_commits_total",
    "Total commit batches rejected on revalidation",
)
PENDING_ASSIGNMENTS = Gauge(
    "allocation_pending_assignments",
    "Pending assignments in the most recently updated session",
)
