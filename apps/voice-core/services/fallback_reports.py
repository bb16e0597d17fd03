from models.report import Report, ReportSource, utc_now
from typing import List
import logging

logger = logging.getLogger(__name__)


class FallbackReportSource:
    """Static report set served when the live Vapi listing is unavailable

    Fallback data is independent of the reports stored by the webhook;
    the two read paths are intentionally not merged.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def get_reports(self) -> List[Report]:
        """Return the fallback set (empty when disabled)

        A fresh list is built per call so no state is shared between requests.
        """
        if not self.enabled:
            logger.debug("Fallback reports disabled - returning empty list")
            return []

        now = utc_now()
        return [
            Report(
                id="fallback-1",
                session_id="fallback-session-1",
                transcript_summary="Fallback report - Vapi API unavailable",
                transcript="This is a fallback report generated when the Vapi API is unavailable.",
                title="Fallback report",
                category="other",
                priority="low",
                received_at=now,
                source=ReportSource.FALLBACK,
            )
        ]
