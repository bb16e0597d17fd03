from models.listing import ReportListing, UpstreamFailure, UpstreamResult
from models.report import ReportSource
from services.vapi_client import VapiClient
import logging

logger = logging.getLogger(__name__)


class ReportListingService:
    """Best-effort listing of recent voice reports.

    Fetches live from Vapi and falls back to the failure's fallback reports
    when the fetch fails. An empty or fallback list is a displayable state,
    so upstream failures come back as success=False rather than an exception.
    """

    def __init__(self, upstream: VapiClient, probe_first: bool = True):
        self.upstream = upstream
        self.probe_first = probe_first

    async def list_reports(self) -> ReportListing:
        """Fetch live reports, else fallback reports

        Returns:
            ReportListing tagged upstream-fetch on success, or fallback with
            the failure kind and message in `error`
        """
        if self.probe_first:
            # Advisory only: the result is logged and the fetch runs regardless
            if not await self.upstream.probe_connection():
                logger.warning("Vapi connection probe failed, proceeding anyway...")

        result: UpstreamResult = await self.upstream.list_reports()

        if isinstance(result, UpstreamFailure):
            logger.error(
                f"Serving {len(result.fallback)} fallback reports after Vapi failure "
                f"({result.kind.value}): {result.message}"
            )
            return ReportListing(
                success=False,
                reports=result.fallback,
                count=len(result.fallback),
                source=ReportSource.FALLBACK,
                error=f"{result.kind.value}: {result.message}",
            )

        logger.info(f"Fetched {len(result.reports)} reports from Vapi")
        return ReportListing(
            success=True,
            reports=result.reports,
            count=len(result.reports),
            source=ReportSource.UPSTREAM_FETCH,
        )
