"""
Inbound webhook payload models.

Vapi delivers server messages wrapped in an envelope:

    {"message": {"type": "end-of-call-report", "call": {"id": "..."}, ...}}

Simpler integrations (and our own test scripts) post a flat body:

    {"event": "call.ended", "callId": "abc123", "sessionId": "sess-1", "summary": "..."}

Both shapes are reduced to a WebhookEvent before anything else looks at them.
"""

from pydantic import BaseModel, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any

# Only the end-of-call message carries the summary, transcript and recording;
# status-update, speech-update, conversation-update and transcript messages
# for the same call arrive earlier and produce no report.
REPORT_EVENT_TYPES = {"end-of-call-report", "call.ended", "call-ended"}


class WebhookEvent(BaseModel):
    event: str
    call_id: Optional[str] = None
    session_id: Optional[str] = None
    summary: Optional[str] = None
    transcript: Optional[str] = None
    recording_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def unwrap_envelope(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("message"), dict):
            return data
        return _flatten_server_message(data["message"])

    @model_validator(mode="after")
    def require_reference(self) -> "WebhookEvent":
        if not self.event.strip():
            raise ValueError("event type is required")
        if not (self.call_id or self.session_id):
            raise ValueError("a call or session reference is required")
        return self

    @property
    def ends_call(self) -> bool:
        return self.event.strip() in REPORT_EVENT_TYPES


def _flatten_server_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Vapi server message onto the flat webhook shape"""
    def section(container: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = container.get(key)
        return value if isinstance(value, dict) else {}

    call = section(message, "call")
    metadata = section(call, "metadata")
    analysis = section(message, "analysis")
    artifact = section(message, "artifact")

    return {
        "event": message.get("type") or "",
        "callId": call.get("id") or message.get("callId"),
        "sessionId": metadata.get("sessionId") or message.get("sessionId"),
        "summary": analysis.get("summary") or message.get("summary"),
        "transcript": message.get("transcript") or artifact.get("transcript"),
        "recordingUrl": message.get("recordingUrl") or artifact.get("recordingUrl"),
    }


class WebhookResponse(BaseModel):
    """Response body for the webhook; never carries call details"""
    success: bool
    report_id: Optional[str] = None
    message: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
