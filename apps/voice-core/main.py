from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from config import settings
from agents.webhook_receiver import IngestOutcome, IngestResult, WebhookReceiver
from agents.report_listing import ReportListingService
from agents.correlation_updater import CorrelationUpdater
from services.report_store import ReportStore
from services.vapi_client import VapiClient
from services.errors import StorageError, StorageFailure
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(
    store: Optional[ReportStore] = None,
    upstream: Optional[VapiClient] = None,
) -> FastAPI:
    """Build the application

    Components passed in are used as-is (tests inject fakes). Anything not
    passed in is built from settings when the process starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Voice Core - webhook, listing and correlation")

        owns_upstream = app.state.upstream is None
        if app.state.store is None:
            app.state.store = ReportStore.from_settings(settings)
        if owns_upstream:
            app.state.upstream = VapiClient.from_settings(settings)

        try:
            yield
        finally:
            logger.info("Shutting down Voice Core")
            if owns_upstream:
                await app.state.upstream.aclose()
                app.state.upstream = None

    app = FastAPI(
        title="Voice Core",
        version="0.1.0",
        description="Ingests Vapi call reports and correlates them with case records",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.upstream = upstream

    register_routes(app)
    return app


# Dependencies

def get_store(request: Request) -> ReportStore:
    return request.app.state.store


def get_upstream(request: Request) -> VapiClient:
    return request.app.state.upstream


def get_webhook_receiver(store: ReportStore = Depends(get_store)) -> WebhookReceiver:
    return WebhookReceiver(store, secret=settings.VAPI_WEBHOOK_SECRET)


def get_listing_service(upstream: VapiClient = Depends(get_upstream)) -> ReportListingService:
    return ReportListingService(upstream, probe_first=settings.PROBE_BEFORE_LISTING)


def get_correlation_updater(store: ReportStore = Depends(get_store)) -> CorrelationUpdater:
    return CorrelationUpdater(store)


def register_routes(app: FastAPI):

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "service": "Voice Core"
        }

    @app.post("/vapi/webhook")
    async def vapi_webhook(
        request: Request,
        receiver: WebhookReceiver = Depends(get_webhook_receiver),
        x_vapi_secret: Optional[str] = Header(None, alias="X-Vapi-Secret"),
    ):
        """Receive a Vapi server message

        Returns:
            {"success": bool, "reportId"?: str, "message"?: str}
            200 stored or duplicate, 400 malformed, 401 bad secret, 500 store failure
        """
        try:
            payload = await request.json()
        except ValueError:
            logger.warning("Webhook rejected: body is not valid JSON")
            result = IngestResult(outcome=IngestOutcome.REJECTED, message="body is not valid JSON")
        else:
            result = await run_in_threadpool(receiver.receive, payload, x_vapi_secret)

        return JSONResponse(
            status_code=result.status_code,
            content=result.to_response().model_dump(by_alias=True, exclude_none=True),
        )

    @app.get("/vapi/webhook")
    async def vapi_webhook_status():
        """Liveness of the webhook route, for configuring Vapi"""
        return {
            "message": "Vapi webhook endpoint is active",
            "timestamp": _timestamp(),
            "status": "ready",
        }

    @app.get("/vapi/reports")
    async def list_vapi_reports(listing: ReportListingService = Depends(get_listing_service)):
        """List recent voice reports, falling back to default data

        Upstream failures still return 200 with success=False and
        source="fallback"; only an unexpected exception returns 500.
        """
        try:
            result = await listing.list_reports()
        except Exception as e:
            logger.error(f"Error in Vapi reports endpoint: {e}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Failed to fetch Vapi reports",
                    "details": str(e),
                    "reports": [],
                    "count": 0,
                    "timestamp": _timestamp(),
                },
            )

        body = result.model_dump(mode="json", by_alias=True)
        if body.get("error") is None:
            body.pop("error", None)
        return JSONResponse(content=body)

    @app.post("/update-case-summary")
    async def update_case_summary(
        request: Request,
        updater: CorrelationUpdater = Depends(get_correlation_updater),
    ):
        """Attach a Vapi session id and summary to a case

        Body:
            {"caseId": str, "summary": str, "sessionId": str}

        Returns:
            {"success": bool, "error"?: str}; 200, 400 or 500
        """
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"success": False, "error": "body is not valid JSON"})

        status_code, body = await run_in_threadpool(updater.update, payload)
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/cases/{case_id}/report")
    async def get_case_report(case_id: str, store: ReportStore = Depends(get_store)):
        """Resolve the report correlated with a case, if it has arrived"""
        try:
            report = await run_in_threadpool(store.get_report_for_case, case_id)
        except StorageError as e:
            if e.cause == StorageFailure.NOT_FOUND:
                raise HTTPException(status_code=404, detail="Case not found")
            logger.error(f"Error resolving report for case {case_id}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to resolve case report")

        if report is None:
            raise HTTPException(status_code=404, detail="No report correlated with this case yet")

        return JSONResponse(content=report.model_dump(mode="json", by_alias=True))

    @app.get("/vapi/config")
    async def vapi_config():
        """Public assistant configuration for the browser widget (never the API key)"""
        return {
            "assistantId": settings.VAPI_ASSISTANT_ID,
            "shareKey": settings.VAPI_SHARE_KEY,
            "available": bool(settings.VAPI_SHARE_KEY and settings.VAPI_ASSISTANT_ID),
        }

    @app.get("/test-connections")
    async def test_connections(
        store: ReportStore = Depends(get_store),
        upstream: VapiClient = Depends(get_upstream),
    ):
        """Diagnostic: probe Vapi and the store without changing anything"""
        logger.info("Testing all API connections...")

        vapi_connection = await upstream.probe_connection()
        calls = await upstream.list_reports()
        store_connection = await run_in_threadpool(store.probe)

        if calls.ok:
            calls_check = {"success": True, "error": None, "calls": len(calls.reports)}
        else:
            calls_check = {"success": False, "error": f"{calls.kind.value}: {calls.message}", "calls": 0}

        return {
            "success": True,
            "message": "Connection tests completed",
            "results": {
                "timestamp": _timestamp(),
                "vapi": {"connection": vapi_connection, "calls": calls_check},
                "supabase": {"connection": store_connection},
                "environment": {
                    "vapiApiKey": bool(settings.VAPI_API_KEY),
                    "vapiAssistantId": bool(settings.VAPI_ASSISTANT_ID),
                    "supabaseUrl": bool(settings.SUPABASE_URL),
                    "supabaseServiceKey": bool(settings.SUPABASE_SERVICE_ROLE_KEY),
                },
            },
        }


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
