from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


class ReportSource(str, Enum):
    """Where a report came from"""
    WEBHOOK = "webhook"
    UPSTREAM_FETCH = "upstream-fetch"
    FALLBACK = "fallback"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Report(BaseModel):
    id: str
    session_id: str = ""  # Empty when the call predates correlation
    transcript_summary: Optional[str] = None
    transcript: Optional[str] = None
    title: str = "Voice Report"
    category: str = "other"  # See REPORT_CATEGORIES in processors.report_classifier
    priority: str = "medium"  # 'low', 'medium', 'high', 'critical'
    audio_url: Optional[str] = None
    event_type: Optional[str] = None  # Upstream event type (webhook reports only)
    received_at: datetime = Field(default_factory=utc_now)  # Ingestion time, not call time
    source: ReportSource

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

    def to_row(self) -> dict:
        """Row shape for the reports table (snake_case, JSON-safe)"""
        return self.model_dump(mode="json")
