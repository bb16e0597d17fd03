from models.case import CorrelationRequest
from services.errors import StorageError, ValidationError
from services.report_store import ReportStore
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, Tuple
import logging

logger = logging.getLogger(__name__)


class CorrelationUpdater:
    """
    Finalizes a case with voice-session data when the operator closes it.

    The update overwrites the case's session id and summary in one write.
    The reports table is not consulted: the case/report join is resolved by
    readers, so a report that has not arrived yet cannot fail this call.
    """

    def __init__(self, store: ReportStore):
        self.store = store

    def parse(self, payload: Any) -> CorrelationRequest:
        """
        Raises:
            ValidationError: body is not an object or a field is missing/blank
        """
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")
        try:
            return CorrelationRequest.model_validate(payload)
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValidationError(f"caseId, summary and sessionId are required (invalid: {', '.join(fields)})") from e

    def update(self, payload: Any) -> Tuple[int, Dict]:
        """
        Apply a correlation update

        Args:
            payload: Decoded body {caseId, summary, sessionId}

        Returns:
            (status_code, body) where body is {"success": bool, "error"?: str}
        """
        try:
            request = self.parse(payload)
        except ValidationError as e:
            logger.warning(f"Correlation update rejected: {e}")
            return 400, {"success": False, "error": str(e)}

        try:
            self.store.attach_session_to_case(request.case_id, request.session_id, request.summary)
        except StorageError as e:
            logger.error(f"Error updating case summary for case {request.case_id}: {e}", exc_info=True)
            return 500, {"success": False, "error": "Failed to update case summary"}

        logger.info(f"Case {request.case_id} correlated with session {request.session_id}")
        return 200, {"success": True}
