"""
Test fixtures for voice report ingestion and listing
"""


def sample_flat_webhook():
    """Flat webhook body as posted by the example integration"""
    return {
        "event": "call.ended",
        "callId": "abc123",
        "sessionId": "sess-1",
        "summary": "caller reported policy violation",
    }


def sample_server_message():
    """Vapi end-of-call-report envelope"""
    return {
        "message": {
            "type": "end-of-call-report",
            "call": {
                "id": "call-789",
                "metadata": {"sessionId": "sess-9"},
            },
            "analysis": {"summary": "Caller described fake invoices in accounting."},
            "transcript": "I need to report fake invoices. Money is being diverted to personal accounts.",
            "recordingUrl": "https://storage.vapi.ai/call-789.wav",
        }
    }


def sample_calls():
    """GET /call response with one record missing its id"""
    return [
        {
            "id": "call-1",
            "status": "ended",
            "transcript": "There is an urgent safety hazard on the loading dock. Someone will get hurt.",
            "analysis": {"summary": "Unsafe loading dock"},
            "recordingUrl": "https://storage.vapi.ai/call-1.wav",
            "metadata": {"sessionId": "sess-1"},
        },
        {
            "id": "call-2",
            "status": "ended",
            "summary": "Minor suggestion about the cafeteria",
        },
        {
            "status": "ended",
            "transcript": "This call has no identifier and must be dropped.",
        },
    ]


def sample_assistant():
    return {"id": "assistant-1", "name": "Ethics Hotline"}
