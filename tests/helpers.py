"""Shared builders for Gmail API payloads and errors."""

import base64
import json

import httplib2
from googleapiclient.errors import HttpError


def b64url(text: str) -> str:
    """Encode text the way the Gmail API returns body data (no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_http_error(status: int = 500, message: str = "Backend Error") -> HttpError:
    resp = httplib2.Response({"status": status})
    resp.reason = message
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp=resp, content=content)


def headers(**values: str) -> list[dict]:
    return [{"name": name, "value": value} for name, value in values.items()]


def text_part(mime_type: str, text: str) -> dict:
    return {"mimeType": mime_type, "filename": "", "body": {"data": b64url(text), "size": len(text)}}


def attachment_part(filename: str, attachment_id: str, size: int = 10, mime_type: str = "application/pdf") -> dict:
    return {
        "mimeType": mime_type,
        "filename": filename,
        "body": {"attachmentId": attachment_id, "size": size},
    }


def full_message(message_id: str, payload: dict, **header_values: str) -> dict:
    payload = dict(payload)
    payload.setdefault("headers", headers(**header_values))
    return {
        "id": message_id,
        "threadId": f"thread-{message_id}",
        "snippet": f"snippet {message_id}",
        "payload": payload,
    }
