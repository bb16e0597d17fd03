from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional


class Case(BaseModel):
    """Correlation view of a row in the cases table.

    The cases table carries many more columns; only the ones this service
    owns are mapped here.
    """
    id: str
    vapi_session_id: Optional[str] = None
    vapi_report_summary: Optional[str] = None

    class Config:
        from_attributes = True


class CorrelationRequest(BaseModel):
    """Body of POST /update-case-summary"""
    case_id: str
    summary: str
    session_id: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("case_id", "session_id")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
