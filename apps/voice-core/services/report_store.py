"""
ReportStore: the only component that touches the reports table and the
correlation columns of the cases table.

Two write rules live here and nowhere else:
1. Reports are append-only and keyed by id. Insertion is a single
   INSERT ... ON CONFLICT (id) DO NOTHING, so concurrent deliveries of the
   same upstream event can never produce two rows.
2. Case correlation fields are overwritten unconditionally (last writer wins)
   in one UPDATE, so a reader never sees the session id from one call and
   the summary from another.

Nothing is cached between calls and nothing is retried.
"""

from supabase import create_client, Client
from postgrest.exceptions import APIError
from typing import Callable, Optional, TypeVar
from models.report import Report
from models.case import Case
from services.errors import StorageError, StorageFailure
import httpx
import logging

logger = logging.getLogger(__name__)

REPORTS_TABLE = "reports"
CASES_TABLE = "cases"

T = TypeVar("T")


def classify_store_error(error: Exception) -> StorageError:
    """Map a supabase/postgrest exception onto a StorageError"""
    if isinstance(error, StorageError):
        return error

    if isinstance(error, APIError):
        code = str(error.code or "")
        if code.startswith("23"):
            cause = StorageFailure.CONSTRAINT_VIOLATION
        elif code == "PGRST116":
            cause = StorageFailure.NOT_FOUND
        else:
            cause = StorageFailure.UNAVAILABLE
        return StorageError(cause, error.message or str(error), original=error)

    if isinstance(error, httpx.HTTPError):
        return StorageError(StorageFailure.UNAVAILABLE, f"store unreachable: {error}", original=error)

    return StorageError(StorageFailure.UNAVAILABLE, str(error), original=error)


class ReportStore:
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "ReportStore":
        """Build a store backed by a service-role Supabase client"""
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        return cls(client)

    def _run(self, operation: str, query: Callable[[], T]) -> T:
        try:
            return query()
        except StorageError:
            raise
        except Exception as e:
            error = classify_store_error(e)
            logger.error(f"Store operation '{operation}' failed ({error.cause.value}): {error.message}")
            raise error from e

    # Reports
    def create_report_if_absent(self, report: Report) -> bool:
        """Insert the report unless one with the same id exists

        Args:
            report: Normalized report; report.id is the idempotency key

        Returns:
            True if a new row was written, False if the id was already stored
        """
        response = self._run(
            "create_report_if_absent",
            lambda: self.client.table(REPORTS_TABLE)
            .upsert(report.to_row(), on_conflict="id", ignore_duplicates=True)
            .execute(),
        )
        created = bool(response.data)

        if created:
            logger.info(f"Stored report {report.id} (source={report.source.value})")
        else:
            logger.info(f"Report {report.id} already stored, insert skipped")

        return created

    def get_report_by_session(self, session_id: str) -> Optional[Report]:
        """Most recently received report for a session"""
        response = self._run(
            "get_report_by_session",
            lambda: self.client.table(REPORTS_TABLE)
            .select("*")
            .eq("session_id", session_id)
            .order("received_at", desc=True)
            .limit(1)
            .execute(),
        )
        return Report(**response.data[0]) if response.data else None

    # Cases
    def get_case(self, case_id: str) -> Optional[Case]:
        """Get the correlation columns of a case"""
        response = self._run(
            "get_case",
            lambda: self.client.table(CASES_TABLE)
            .select("id, vapi_session_id, vapi_report_summary")
            .eq("id", case_id)
            .limit(1)
            .execute(),
        )
        return Case(**response.data[0]) if response.data else None

    def attach_session_to_case(self, case_id: str, session_id: str, summary: str) -> Case:
        """Overwrite the case's session id and summary (last writer wins)

        Both columns are set by a single UPDATE. No version check is made:
        concurrent updaters for the same case are ordered by the database.

        Raises:
            StorageError: not-found if no case has this id, otherwise the
                classified store failure
        """
        response = self._run(
            "attach_session_to_case",
            lambda: self.client.table(CASES_TABLE)
            .update({"vapi_session_id": session_id, "vapi_report_summary": summary})
            .eq("id", case_id)
            .execute(),
        )

        if not response.data:
            logger.warning(f"Case {case_id} not found, session {session_id} not attached")
            raise StorageError(StorageFailure.NOT_FOUND, f"case {case_id} not found")

        logger.info(f"Attached session {session_id} to case {case_id}")
        return Case(**response.data[0])

    def get_report_for_case(self, case_id: str) -> Optional[Report]:
        """Resolve the case -> report join at read time

        Returns:
            The report whose session_id matches the case's vapi_session_id,
            or None when the case has no session yet or the report has not
            arrived

        Raises:
            StorageError: not-found if the case does not exist
        """
        case = self.get_case(case_id)
        if case is None:
            raise StorageError(StorageFailure.NOT_FOUND, f"case {case_id} not found")

        if not case.vapi_session_id:
            return None

        return self.get_report_by_session(case.vapi_session_id)

    def probe(self) -> bool:
        """Best-effort connectivity check used by /test-connections"""
        try:
            self.client.table(REPORTS_TABLE).select("id").limit(1).execute()
            return True
        except Exception as e:
            logger.warning(f"Store probe failed: {e}")
            return False
