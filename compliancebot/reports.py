"""
compliancebot - Report aggregation over the full document set.
"""

from dataclasses import dataclass, field
from typing import Iterable

from .models import ComplianceStatus, Document, Report


@dataclass
class DocumentGroups:
    approved: list[Document] = field(default_factory=list)
    rejected: list[Document] = field(default_factory=list)
    pending: list[Document] = field(default_factory=list)


def _rate(count: int, total: int) -> int:
    """Percentage rounded half-up; 0 for an empty set."""
    if total == 0:
        return 0
    return (200 * count + total) // (2 * total)


class ReportAggregator:
    """Computes status counts and approval/rejection rates."""

    def partition(self, documents: Iterable[Document]) -> DocumentGroups:
        """Group documents by status; anything not approved/rejected is pending."""
        groups = DocumentGroups()
        for doc in documents:
            status = doc.compliance_status
            if status == ComplianceStatus.APPROVED:
                groups.approved.append(doc)
            elif status == ComplianceStatus.REJECTED:
                groups.rejected.append(doc)
            else:
                groups.pending.append(doc)
        return groups

    def aggregate(self, documents: Iterable[Document]) -> Report:
        groups = self.partition(documents)
        approved = len(groups.approved)
        rejected = len(groups.rejected)
        pending = len(groups.pending)
        total = approved + rejected + pending
        return Report(
            total=total,
            approved_count=approved,
            rejected_count=rejected,
            pending_count=pending,
            approval_rate_percent=_rate(approved, total),
            rejection_rate_percent=_rate(rejected, total),
        )
