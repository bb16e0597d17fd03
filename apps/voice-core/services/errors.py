"""Error taxonomy shared by the gateway, the upstream client and the routes"""

from enum import Enum
from typing import Optional

from models.listing import UpstreamFailureKind


class VoiceCoreError(Exception):
    """Base class for errors raised by this service"""


class ValidationError(VoiceCoreError):
    """Inbound payload is malformed; rejected without retry"""


class StorageFailure(str, Enum):
    NOT_FOUND = "not-found"
    CONSTRAINT_VIOLATION = "constraint-violation"
    UNAVAILABLE = "unavailable"


class StorageError(VoiceCoreError):
    """Persistent store failure, surfaced to the immediate caller"""

    def __init__(self, cause: StorageFailure, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
        self.message = message
        self.original = original

    def __str__(self) -> str:
        return f"{self.cause.value}: {self.message}"


class UpstreamError(VoiceCoreError):
    """Vapi unavailable, rejected our credentials, or sent something unparseable.

    Only raised inside VapiClient; it is converted to an UpstreamFailure
    before leaving the client.
    """

    def __init__(self, kind: UpstreamFailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
