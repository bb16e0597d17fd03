"""Tests for ReportStore against a mocked Supabase client"""
import pytest
import httpx
from unittest.mock import Mock
from postgrest.exceptions import APIError

from models.report import Report, ReportSource
from services.errors import StorageError, StorageFailure
from services.report_store import ReportStore, classify_store_error


def make_report(report_id="abc123", session_id="sess-1"):
    return Report(
        id=report_id,
        session_id=session_id,
        transcript_summary="caller reported policy violation",
        source=ReportSource.WEBHOOK,
    )


def api_error(code, message="boom"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


@pytest.fixture
def mock_client():
    """Supabase client whose query builders return themselves"""
    client = Mock()
    table = Mock()
    client.table.return_value = table
    for method in ("select", "eq", "order", "limit", "upsert", "update"):
        getattr(table, method).return_value = table
    table.execute.return_value = Mock(data=[])
    return client


@pytest.fixture
def report_store(mock_client):
    return ReportStore(mock_client)


def table_of(client):
    return client.table.return_value


class TestCreateReportIfAbsent:

    def test_new_report_is_inserted(self, report_store, mock_client):
        table_of(mock_client).execute.return_value = Mock(data=[{"id": "abc123"}])

        assert report_store.create_report_if_absent(make_report()) is True
        mock_client.table.assert_called_with("reports")

    def test_existing_report_is_not_inserted_again(self, report_store, mock_client):
        """ON CONFLICT DO NOTHING returns no rows for an existing id"""
        table_of(mock_client).execute.return_value = Mock(data=[])

        assert report_store.create_report_if_absent(make_report()) is False

    def test_insert_is_a_single_conflict_ignoring_upsert(self, report_store, mock_client):
        report_store.create_report_if_absent(make_report())

        table = table_of(mock_client)
        table.upsert.assert_called_once()
        args, kwargs = table.upsert.call_args
        assert kwargs == {"on_conflict": "id", "ignore_duplicates": True}
        row = args[0]
        assert row["id"] == "abc123"
        assert row["session_id"] == "sess-1"
        assert row["source"] == "webhook"
        assert isinstance(row["received_at"], str)
        table.update.assert_not_called()

    def test_store_failure_is_raised_as_storage_error(self, report_store, mock_client):
        table_of(mock_client).execute.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(StorageError) as exc_info:
            report_store.create_report_if_absent(make_report())

        assert exc_info.value.cause == StorageFailure.UNAVAILABLE

    def test_failure_is_not_retried(self, report_store, mock_client):
        table_of(mock_client).execute.side_effect = api_error("57014")

        with pytest.raises(StorageError):
            report_store.create_report_if_absent(make_report())

        assert table_of(mock_client).execute.call_count == 1


class TestAttachSessionToCase:

    def test_both_fields_written_in_one_update(self, report_store, mock_client):
        table_of(mock_client).execute.return_value = Mock(data=[{
            "id": "case-42",
            "vapi_session_id": "sess-1",
            "vapi_report_summary": "Reviewed, escalated",
        }])

        case = report_store.attach_session_to_case("case-42", "sess-1", "Reviewed, escalated")

        table = table_of(mock_client)
        mock_client.table.assert_called_with("cases")
        table.update.assert_called_once_with({
            "vapi_session_id": "sess-1",
            "vapi_report_summary": "Reviewed, escalated",
        })
        table.eq.assert_called_once_with("id", "case-42")
        assert case.vapi_session_id == "sess-1"
        assert case.vapi_report_summary == "Reviewed, escalated"

    def test_overwrite_is_unconditional(self, report_store, mock_client):
        """No version or existing-value filter is added to the update"""
        table_of(mock_client).execute.return_value = Mock(data=[{"id": "case-42"}])

        report_store.attach_session_to_case("case-42", "sess-2", "second")

        table_of(mock_client).eq.assert_called_once_with("id", "case-42")

    def test_missing_case_is_not_found(self, report_store, mock_client):
        table_of(mock_client).execute.return_value = Mock(data=[])

        with pytest.raises(StorageError) as exc_info:
            report_store.attach_session_to_case("missing", "sess-1", "summary")

        assert exc_info.value.cause == StorageFailure.NOT_FOUND


class TestReads:

    def test_get_report_for_case_joins_on_session(self, report_store, mock_client):
        report_row = make_report().to_row()
        table_of(mock_client).execute.side_effect = [
            Mock(data=[{"id": "case-42", "vapi_session_id": "sess-1", "vapi_report_summary": "x"}]),
            Mock(data=[report_row]),
        ]

        report = report_store.get_report_for_case("case-42")

        assert report.id == "abc123"
        table_of(mock_client).eq.assert_any_call("session_id", "sess-1")

    def test_get_report_for_uncorrelated_case_is_none(self, report_store, mock_client):
        table_of(mock_client).execute.return_value = Mock(data=[{"id": "case-42", "vapi_session_id": None}])

        assert report_store.get_report_for_case("case-42") is None

    def test_get_report_for_missing_case_raises(self, report_store, mock_client):
        table_of(mock_client).execute.return_value = Mock(data=[])

        with pytest.raises(StorageError) as exc_info:
            report_store.get_report_for_case("missing")

        assert exc_info.value.cause == StorageFailure.NOT_FOUND

    def test_probe_reports_failure_without_raising(self, report_store, mock_client):
        table_of(mock_client).execute.side_effect = httpx.ConnectError("down")

        assert report_store.probe() is False


class TestErrorClassification:

    @pytest.mark.parametrize("code,cause", [
        ("23505", StorageFailure.CONSTRAINT_VIOLATION),
        ("23503", StorageFailure.CONSTRAINT_VIOLATION),
        ("PGRST116", StorageFailure.NOT_FOUND),
        ("42P01", StorageFailure.UNAVAILABLE),
    ])
    def test_postgrest_codes(self, code, cause):
        assert classify_store_error(api_error(code)).cause == cause

    def test_transport_error_is_unavailable(self):
        error = classify_store_error(httpx.ReadTimeout("slow"))
        assert error.cause == StorageFailure.UNAVAILABLE

    def test_storage_error_passes_through(self):
        original = StorageError(StorageFailure.NOT_FOUND, "gone")
        assert classify_store_error(original) is original
