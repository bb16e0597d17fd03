#!/usr/bin/env python3
"""
Walk a running Voice Core server through the webhook -> correlation flow.

This:
- Posts a call-ended webhook (twice, to show the duplicate is ignored)
- Attaches the session to a case
- Lists reports (live or fallback)

Usage:
    python scripts/send-test-webhook.py <case-id> [base-url]

Prerequisites:
    - Voice Core server running (uvicorn main:app from apps/voice-core)
    - docs/migrations/create_voice_reports.sql applied
    - <case-id> exists in the cases table
"""

import sys
import requests
from uuid import uuid4


def print_result(step, success, message=""):
    """Print a step result"""
    status = "✅ PASS" if success else "❌ FAIL"
    print(f"{status} - {step}")
    if message:
        print(f"    {message}")


def main(case_id: str, base_url: str = "http://localhost:8000"):
    call_id = f"test-call-{uuid4().hex[:8]}"
    session_id = f"sess-{uuid4().hex[:8]}"
    payload = {
        "event": "call.ended",
        "callId": call_id,
        "sessionId": session_id,
        "summary": "caller reported policy violation",
    }

    first = requests.post(f"{base_url}/vapi/webhook", json=payload, timeout=10)
    print_result("Webhook stored", first.status_code == 200, str(first.json()))

    second = requests.post(f"{base_url}/vapi/webhook", json=payload, timeout=10)
    body = second.json()
    print_result(
        "Duplicate webhook ignored",
        second.status_code == 200 and body.get("reportId") == call_id,
        str(body),
    )

    update = requests.post(
        f"{base_url}/update-case-summary",
        json={"caseId": case_id, "summary": "Reviewed, escalated", "sessionId": session_id},
        timeout=10,
    )
    print_result("Case correlated", update.status_code == 200, str(update.json()))

    joined = requests.get(f"{base_url}/cases/{case_id}/report", timeout=10)
    print_result(
        "Case resolves to report",
        joined.status_code == 200 and joined.json().get("id") == call_id,
        f"status {joined.status_code}",
    )

    listing = requests.get(f"{base_url}/vapi/reports", timeout=30).json()
    print_result(
        "Reports listed",
        "reports" in listing,
        f"source={listing.get('source')} count={listing.get('count')} error={listing.get('error')}",
    )


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    main(*sys.argv[1:3])
