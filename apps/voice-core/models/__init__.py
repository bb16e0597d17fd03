# Models module - Pydantic models for reports, cases and the HTTP contracts
from models.report import Report, ReportSource
from models.case import Case, CorrelationRequest
from models.webhook import WebhookEvent, WebhookResponse
from models.listing import (
    ReportListing,
    UpstreamFailure,
    UpstreamFailureKind,
    UpstreamResult,
    UpstreamSuccess,
)

__all__ = [
    "Report",
    "ReportSource",
    "Case",
    "CorrelationRequest",
    "WebhookEvent",
    "WebhookResponse",
    "ReportListing",
    "UpstreamFailure",
    "UpstreamFailureKind",
    "UpstreamResult",
    "UpstreamSuccess",
]
