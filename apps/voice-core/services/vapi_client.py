"""
VapiClient: typed client for the Vapi REST API.

Listing never raises. Every outcome is returned as an UpstreamSuccess or an
UpstreamFailure carrying a failure kind, the fallback reports and a message.
All requests go through one httpx.AsyncClient owned by the instance, with a
bounded timeout; call aclose() at shutdown.
"""

from typing import Any, Dict, List, Optional
from models.listing import UpstreamFailure, UpstreamFailureKind, UpstreamResult, UpstreamSuccess
from processors.call_normalizer import CallNormalizer
from services.errors import UpstreamError
from services.fallback_reports import FallbackReportSource
import httpx
import logging

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.vapi.ai"


class VapiClient:
    def __init__(
        self,
        api_key: str,
        assistant_id: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        list_limit: int = 100,
        fallback: Optional[FallbackReportSource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Vapi client.

        Args:
            api_key: Private Vapi API key, sent as a bearer token
            assistant_id: Assistant used for the connection probe
            base_url: Vapi API base URL
            timeout: Per-request timeout in seconds
            list_limit: Number of calls requested when listing
            fallback: Source of reports attached to listing failures
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        self.assistant_id = assistant_id
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.list_limit = list_limit
        self.fallback = fallback or FallbackReportSource(enabled=False)
        self.normalizer = CallNormalizer()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

        logger.info(f"Initialized VapiClient with base_url={self.base_url}")

    @classmethod
    def from_settings(cls, settings) -> "VapiClient":
        return cls(
            api_key=settings.VAPI_API_KEY,
            assistant_id=settings.VAPI_ASSISTANT_ID,
            base_url=settings.VAPI_BASE_URL,
            timeout=settings.VAPI_TIMEOUT_SECONDS,
            list_limit=settings.VAPI_LIST_LIMIT,
            fallback=FallbackReportSource(enabled=settings.ENABLE_FALLBACK_REPORTS),
        )

    async def aclose(self):
        await self._client.aclose()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a path and decode the JSON body

        Raises:
            UpstreamError: classified transport, auth, status or decoding failure
        """
        if not self.api_key:
            raise UpstreamError(UpstreamFailureKind.AUTH, "Vapi API key is not configured")

        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamError(UpstreamFailureKind.NETWORK, f"Vapi request timed out after {self.timeout}s") from e
        except httpx.DecodingError as e:
            raise UpstreamError(UpstreamFailureKind.MALFORMED_RESPONSE, f"Vapi body could not be decoded: {e}") from e
        except httpx.HTTPError as e:
            # TransportError, TooManyRedirects and anything else httpx raises
            raise UpstreamError(UpstreamFailureKind.NETWORK, f"Vapi request failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise UpstreamError(UpstreamFailureKind.AUTH, f"Vapi rejected credentials ({status})")
        if status >= 500:
            raise UpstreamError(UpstreamFailureKind.UPSTREAM_5XX, f"Vapi server error ({status})")
        if not response.is_success:
            raise UpstreamError(UpstreamFailureKind.MALFORMED_RESPONSE, f"Unexpected Vapi status {status}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(UpstreamFailureKind.MALFORMED_RESPONSE, "Vapi returned a non-JSON body") from e

    async def get_assistant(self) -> Optional[Dict[str, Any]]:
        """Fetch assistant metadata, or None on any failure"""
        if not self.assistant_id:
            logger.warning("No Vapi assistant id configured")
            return None

        try:
            assistant = await self._get_json(f"/assistant/{self.assistant_id}")
        except UpstreamError as e:
            logger.warning(f"Error fetching Vapi assistant ({e.kind.value}): {e.message}")
            return None

        return assistant if isinstance(assistant, dict) else None

    async def probe_connection(self) -> bool:
        """Best-effort health signal; never raises and never gates other calls"""
        assistant = await self.get_assistant()
        if assistant:
            logger.info("Vapi connection probe succeeded")
            return True

        logger.warning("Vapi connection probe failed - no assistant data")
        return False

    async def fetch_calls(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """List raw call objects

        Raises:
            UpstreamError: on any transport, auth, status or shape failure
        """
        calls = await self._get_json("/call", params={"limit": limit or self.list_limit})
        if not isinstance(calls, list):
            raise UpstreamError(
                UpstreamFailureKind.MALFORMED_RESPONSE,
                f"Expected a list of calls, got {type(calls).__name__}",
            )
        return calls

    async def list_reports(self) -> UpstreamResult:
        """List recent calls as reports

        Returns:
            UpstreamSuccess with normalized reports, or UpstreamFailure with the
            failure kind, the fallback reports and a readable message
        """
        try:
            calls = await self.fetch_calls()
        except UpstreamError as e:
            logger.error(f"Vapi listing failed ({e.kind.value}): {e.message}")
            return UpstreamFailure(kind=e.kind, fallback=self.fallback.get_reports(), message=e.message)

        logger.info(f"Retrieved {len(calls)} calls from Vapi")
        reports = self.normalizer.reports_from_calls(calls)
        return UpstreamSuccess(reports=reports)
