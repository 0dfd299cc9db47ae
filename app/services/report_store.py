"""
Report Store - keyed collection of incident reports.

Enforces key presence and uniqueness only. Business rules live in the
LifecycleEngine, which is the only caller of create()/update().
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging
import uuid

from app.core.errors import ConflictError, NotFoundError
from app.models.report import Report

logger = logging.getLogger(__name__)


def new_report_id() -> str:
    return f"REP-{uuid.uuid4().hex[:10].upper()}"


class ReportStore:
    """In-memory report collection. Reads hand out deep copies."""

    def __init__(self):
        self._reports: Dict[str, Report] = {}

    def create(self, report: Report) -> Report:
        if report.id in self._reports:
            raise ConflictError(f"Report {report.id} already exists")
        self._reports[report.id] = report.model_copy(deep=True)
        return report.model_copy(deep=True)

    def get(self, report_id: str) -> Report:
        return self._get(report_id).model_copy(deep=True)

    def find(self, report_id: str) -> Optional[Report]:
        report = self._reports.get(report_id)
        return report.model_copy(deep=True) if report else None

    def update(self, report_id: str, fields: Dict) -> Report:
        """
        Merge fields onto the stored record and refresh updated_at.

        Raises:
            NotFoundError: Unknown report id
        """
        existing = self._get(report_id)
        merged = dict(fields)
        merged["updated_at"] = datetime.now(timezone.utc)
        updated = existing.model_copy(update=merged, deep=True)
        self._reports[report_id] = updated
        return updated.model_copy(deep=True)

    def all(self) -> List[Report]:
        return [report.model_copy(deep=True) for report in self._reports.values()]

    def by_owner(self, user_id: str) -> List[Report]:
        return [
            report.model_copy(deep=True)
            for report in self._reports.values()
            if report.user_id == user_id
        ]

    def owned_ids(self, user_id: str) -> List[str]:
        return [report.id for report in self._reports.values() if report.user_id == user_id]

    def __len__(self) -> int:
        return len(self._reports)

    def _get(self, report_id: str) -> Report:
        report = self._reports.get(report_id)
        if report is None:
            raise NotFoundError(f"Report {report_id} not found")
        return report
