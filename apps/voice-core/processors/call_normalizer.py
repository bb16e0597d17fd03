"""
CallNormalizer: maps upstream payloads onto the internal Report shape.

Upstream fields are read defensively: anything optional that is missing
becomes None or an empty string. The two entry points differ on one point:

- Fetched calls without an id are dropped. Synthesizing ids there would give
  the same call a different id on every fetch.
- Webhook events without a call id get a deterministic id derived from the
  event type and session id, so redeliveries of the same event collide on
  the same key.
"""

from models.report import Report, ReportSource, utc_now
from models.webhook import WebhookEvent
from processors.report_classifier import ReportClassifier
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import NAMESPACE_URL, uuid5
import logging

logger = logging.getLogger(__name__)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class CallNormalizer:
    def __init__(self):
        self.classifier = ReportClassifier()

    def _build(
        self,
        report_id: str,
        session_id: str,
        summary: Optional[str],
        transcript: Optional[str],
        audio_url: Optional[str],
        source: ReportSource,
        received_at: datetime,
        event_type: Optional[str] = None,
    ) -> Report:
        content = transcript or summary or ""
        if not summary and transcript:
            summary = self.classifier.summarize_transcript(transcript) or None

        return Report(
            id=report_id,
            session_id=session_id,
            transcript_summary=summary,
            transcript=transcript,
            title=self.classifier.extract_title(content),
            category=self.classifier.categorize(content),
            priority=self.classifier.prioritize(content),
            audio_url=audio_url,
            event_type=event_type,
            received_at=received_at,
            source=source,
        )

    def report_from_call(self, call: Dict[str, Any], received_at: Optional[datetime] = None) -> Optional[Report]:
        """Normalize one call object from GET /call

        Returns:
            Report tagged upstream-fetch, or None if the call has no id
        """
        if not isinstance(call, dict):
            logger.warning(f"Skipping non-object call record: {type(call).__name__}")
            return None

        call_id = _text(call.get("id"))
        if not call_id:
            logger.warning("Skipping upstream call without an id")
            return None

        metadata = _dict(call.get("metadata"))
        analysis = _dict(call.get("analysis"))
        artifact = _dict(call.get("artifact"))

        return self._build(
            report_id=call_id,
            session_id=_text(metadata.get("sessionId")) or call_id,
            summary=_text(analysis.get("summary")) or _text(call.get("summary")),
            transcript=_text(call.get("transcript")) or _text(artifact.get("transcript")),
            audio_url=(
                _text(call.get("recordingUrl"))
                or _text(call.get("stereoRecordingUrl"))
                or _text(artifact.get("recordingUrl"))
            ),
            source=ReportSource.UPSTREAM_FETCH,
            received_at=received_at or utc_now(),
        )

    def reports_from_calls(self, calls: List[Dict[str, Any]]) -> List[Report]:
        """Normalize a call list, dropping records without an id"""
        received_at = utc_now()
        reports = []
        for call in calls:
            report = self.report_from_call(call, received_at)
            if report is not None:
                reports.append(report)

        skipped = len(calls) - len(reports)
        if skipped:
            logger.info(f"Excluded {skipped} of {len(calls)} upstream calls during normalization")
        return reports

    @staticmethod
    def webhook_report_id(event: WebhookEvent) -> str:
        """Idempotency key for a webhook event"""
        if event.call_id:
            return event.call_id
        return str(uuid5(NAMESPACE_URL, f"vapi-event:{event.event}:{event.session_id}"))

    def report_from_webhook(self, event: WebhookEvent) -> Report:
        """Normalize a validated webhook event into a report tagged webhook"""
        return self._build(
            report_id=self.webhook_report_id(event),
            session_id=_text(event.session_id) or _text(event.call_id) or "",
            summary=_text(event.summary),
            transcript=_text(event.transcript),
            audio_url=_text(event.recording_url),
            source=ReportSource.WEBHOOK,
            received_at=utc_now(),
            event_type=event.event,
        )
