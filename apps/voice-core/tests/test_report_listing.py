"""Tests for ReportListingService fallback behavior"""
import pytest
from unittest.mock import AsyncMock, Mock

from agents.report_listing import ReportListingService
from models.listing import UpstreamFailure, UpstreamFailureKind, UpstreamSuccess
from models.report import Report, ReportSource
from services.fallback_reports import FallbackReportSource


def live_report(report_id="call-1"):
    return Report(id=report_id, session_id="sess-1", source=ReportSource.UPSTREAM_FETCH)


@pytest.fixture
def upstream():
    upstream = Mock()
    upstream.probe_connection = AsyncMock(return_value=True)
    upstream.list_reports = AsyncMock()
    return upstream


@pytest.mark.asyncio
async def test_live_reports_are_tagged_upstream_fetch(upstream):
    upstream.list_reports.return_value = UpstreamSuccess(reports=[live_report("a"), live_report("b")])

    listing = await ReportListingService(upstream).list_reports()

    assert listing.success is True
    assert listing.source == ReportSource.UPSTREAM_FETCH
    assert listing.count == 2
    assert listing.error is None
    assert listing.timestamp is not None


@pytest.mark.asyncio
async def test_failure_returns_fallback_with_error(upstream):
    fallback = FallbackReportSource(enabled=True).get_reports()
    upstream.list_reports.return_value = UpstreamFailure(
        kind=UpstreamFailureKind.NETWORK,
        fallback=fallback,
        message="Vapi request timed out after 10.0s",
    )

    listing = await ReportListingService(upstream).list_reports()

    assert listing.success is False
    assert listing.source == ReportSource.FALLBACK
    assert listing.reports == fallback
    assert listing.count == len(fallback)
    assert listing.error.startswith("network")


@pytest.mark.asyncio
async def test_failure_with_empty_fallback(upstream):
    upstream.list_reports.return_value = UpstreamFailure(
        kind=UpstreamFailureKind.AUTH, message="Vapi rejected credentials (401)"
    )

    listing = await ReportListingService(upstream).list_reports()

    assert listing.success is False
    assert listing.reports == []
    assert listing.count == 0


@pytest.mark.asyncio
async def test_failed_probe_does_not_block_fetch(upstream):
    upstream.probe_connection.return_value = False
    upstream.list_reports.return_value = UpstreamSuccess(reports=[live_report()])

    listing = await ReportListingService(upstream).list_reports()

    upstream.list_reports.assert_awaited_once()
    assert listing.success is True


@pytest.mark.asyncio
async def test_probe_can_be_disabled(upstream):
    upstream.list_reports.return_value = UpstreamSuccess(reports=[])

    await ReportListingService(upstream, probe_first=False).list_reports()

    upstream.probe_connection.assert_not_awaited()
