"""
Result types for the upstream client and the listing endpoint.

The upstream client returns exactly one of UpstreamSuccess / UpstreamFailure
instead of raising, so callers always handle the fallback branch.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional, Union
from datetime import datetime
from enum import Enum

from models.report import Report, ReportSource, utc_now


class UpstreamFailureKind(str, Enum):
    NETWORK = "network"
    AUTH = "auth"
    UPSTREAM_5XX = "upstream-5xx"
    MALFORMED_RESPONSE = "malformed-response"


class UpstreamSuccess(BaseModel):
    ok: Literal[True] = True
    reports: List[Report]
    source: ReportSource = ReportSource.UPSTREAM_FETCH


class UpstreamFailure(BaseModel):
    ok: Literal[False] = False
    kind: UpstreamFailureKind
    fallback: List[Report] = []
    message: str


UpstreamResult = Union[UpstreamSuccess, UpstreamFailure]


class ReportListing(BaseModel):
    """Body of GET /vapi/reports"""
    success: bool
    reports: List[Report] = []
    count: int = 0
    source: ReportSource
    timestamp: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
