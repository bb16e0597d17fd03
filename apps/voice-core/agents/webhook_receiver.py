"""
WebhookReceiver: turns one Vapi webhook delivery into at most one stored report.

Per delivery: received -> validated -> stored | duplicate-ignored | rejected.
Well-formed events other than the end-of-call report (status updates,
transcript fragments) are acknowledged without a write.

Vapi delivers at least once, so the same event may arrive several times,
out of order, or late. A redelivery is acknowledged with success and the
existing report id, without a second write, so Vapi's retries converge.
Storage failures are reported as server errors and not retried here;
retrying is Vapi's job.
"""

from models.report import Report
from models.webhook import WebhookEvent, WebhookResponse
from processors.call_normalizer import CallNormalizer
from services.errors import StorageError, ValidationError
from services.report_store import ReportStore
from pydantic import BaseModel, ValidationError as PydanticValidationError
from typing import Any, Optional
from enum import Enum
import hmac
import logging

logger = logging.getLogger(__name__)


class IngestOutcome(str, Enum):
    STORED = "stored"
    DUPLICATE_IGNORED = "duplicate-ignored"
    REJECTED = "rejected"
    UNAUTHORIZED = "unauthorized"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"


OUTCOME_STATUS_CODES = {
    IngestOutcome.STORED: 200,
    IngestOutcome.DUPLICATE_IGNORED: 200,
    IngestOutcome.ACKNOWLEDGED: 200,
    IngestOutcome.REJECTED: 400,
    IngestOutcome.UNAUTHORIZED: 401,
    IngestOutcome.FAILED: 500,
}


class IngestResult(BaseModel):
    outcome: IngestOutcome
    report_id: Optional[str] = None
    message: Optional[str] = None

    @property
    def status_code(self) -> int:
        return OUTCOME_STATUS_CODES[self.outcome]

    def to_response(self) -> WebhookResponse:
        return WebhookResponse(
            success=self.status_code == 200,
            report_id=self.report_id,
            message=self.message,
        )


class WebhookReceiver:
    def __init__(self, store: ReportStore, secret: Optional[str] = None):
        """
        Args:
            store: Report store gateway
            secret: Expected X-Vapi-Secret header value; None disables the check
        """
        self.store = store
        self.secret = secret
        self.normalizer = CallNormalizer()

    def validate(self, payload: Any) -> WebhookEvent:
        """Reduce a decoded JSON body to a WebhookEvent

        Raises:
            ValidationError: body is not an object, or lacks an event type or
                a call/session reference
        """
        if not isinstance(payload, dict):
            raise ValidationError("webhook body must be a JSON object")

        try:
            return WebhookEvent.model_validate(payload)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"invalid webhook payload: {problems}") from e

    def _authorized(self, provided_secret: Optional[str]) -> bool:
        if not self.secret:
            return True
        return hmac.compare_digest((provided_secret or "").encode(), self.secret.encode())

    def receive(self, payload: Any, provided_secret: Optional[str] = None) -> IngestResult:
        """Validate, normalize and store one delivery

        Args:
            payload: Decoded JSON body
            provided_secret: Value of the X-Vapi-Secret header, if any

        Returns:
            IngestResult; never raises for validation or storage failures
        """
        if not self._authorized(provided_secret):
            logger.warning("Webhook rejected: missing or invalid X-Vapi-Secret")
            return IngestResult(outcome=IngestOutcome.UNAUTHORIZED, message="unauthorized")

        try:
            event = self.validate(payload)
        except ValidationError as e:
            logger.warning(f"Webhook rejected: {e}")
            return IngestResult(outcome=IngestOutcome.REJECTED, message=str(e))

        if not event.ends_call:
            logger.info(f"Webhook event '{event.event}' for call {event.call_id or event.session_id} needs no processing")
            return IngestResult(
                outcome=IngestOutcome.ACKNOWLEDGED,
                message="webhook received but no processing needed",
            )

        report: Report = self.normalizer.report_from_webhook(event)
        logger.info(f"Webhook event '{event.event}' validated for report {report.id}")

        try:
            created = self.store.create_report_if_absent(report)
        except StorageError as e:
            logger.error(
                f"Failed to store webhook report {report.id} (event '{event.event}', "
                f"session '{report.session_id}'): {e}",
                exc_info=True,
            )
            return IngestResult(
                outcome=IngestOutcome.FAILED,
                report_id=report.id,
                message="failed to store report",
            )

        if not created:
            logger.info(f"Duplicate webhook delivery for report {report.id} ignored")
            return IngestResult(
                outcome=IngestOutcome.DUPLICATE_IGNORED,
                report_id=report.id,
                message="duplicate event ignored",
            )

        return IngestResult(outcome=IngestOutcome.STORED, report_id=report.id)
