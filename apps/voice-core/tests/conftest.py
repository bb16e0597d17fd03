import threading
import pytest
from typing import Dict, Optional
from unittest.mock import Mock

from models.case import Case
from models.report import Report
from services.errors import StorageError, StorageFailure
from services.report_store import ReportStore


class InMemoryReportStore(ReportStore):
    """ReportStore over dicts, with the same write rules as the Supabase one"""

    def __init__(self):
        super().__init__(client=Mock())
        self.reports: Dict[str, Report] = {}
        self.cases: Dict[str, Case] = {}
        self.writes = 0
        self.fail_with: Optional[StorageFailure] = None
        self._lock = threading.Lock()

    def _check_failure(self):
        if self.fail_with is not None:
            raise StorageError(self.fail_with, "simulated store failure")

    def create_report_if_absent(self, report: Report) -> bool:
        self._check_failure()
        with self._lock:
            if report.id in self.reports:
                return False
            self.reports[report.id] = report
            self.writes += 1
            return True

    def get_report_by_session(self, session_id: str) -> Optional[Report]:
        self._check_failure()
        matches = [r for r in self.reports.values() if r.session_id == session_id]
        return max(matches, key=lambda r: r.received_at) if matches else None

    def get_case(self, case_id: str) -> Optional[Case]:
        self._check_failure()
        return self.cases.get(case_id)

    def attach_session_to_case(self, case_id: str, session_id: str, summary: str) -> Case:
        self._check_failure()
        with self._lock:
            if case_id not in self.cases:
                raise StorageError(StorageFailure.NOT_FOUND, f"case {case_id} not found")
            case = Case(id=case_id, vapi_session_id=session_id, vapi_report_summary=summary)
            self.cases[case_id] = case
            self.writes += 1
            return case

    def probe(self) -> bool:
        return self.fail_with is None


@pytest.fixture
def store():
    """In-memory store seeded with one case"""
    store = InMemoryReportStore()
    store.cases["case-42"] = Case(id="case-42")
    return store
