"""MIME part helpers for Gmail API message payloads.

The Gmail API returns message bodies as a tree of parts, each with a
``mimeType``, an optional ``filename``, a ``body`` carrying base64url ``data``
or an ``attachmentId``, and optional nested ``parts``.
"""

import base64
import re
from typing import Optional


BR_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
P_CLOSE_TAG = re.compile(r"</p>", re.IGNORECASE)
ANY_TAG = re.compile(r"<[^>]*>")

# Only these entities are unescaped; anything else passes through unchanged.
HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def decode_base64url(data: str) -> bytes:
    """Decode Gmail's URL-safe base64, tolerating missing padding."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def decode_part_data(part: dict) -> str:
    """
    Decode the text body of a single MIME part.

    Args:
        part: MIME part dict from the Gmail API

    Returns:
        Decoded text, or an empty string when the part carries no data
    """
    data = part.get("body", {}).get("data")
    if not data:
        return ""
    return decode_base64url(data).decode("utf-8", errors="replace")


def get_headers(message: dict) -> dict[str, str]:
    """Map header name to value for the message's top-level payload."""
    result: dict[str, str] = {}
    for header in message.get("payload", {}).get("headers", []):
        # First occurrence wins for repeated headers.
        result.setdefault(header["name"], header["value"])
    return result


def split_addresses(value: str) -> list[str]:
    return [addr.strip() for addr in value.split(",")]


def extract_plain_body(payload: dict) -> str:
    """
    Extract the body used by the plain read path.

    The payload's own data wins when present. Otherwise only the top-level
    parts are scanned for the first ``text/plain`` part with data; nested
    multipart containers are not descended into.

    Args:
        payload: ``message["payload"]`` from a ``format="full"`` fetch

    Returns:
        Decoded body text (may be empty)
    """
    if payload.get("body", {}).get("data"):
        return decode_part_data(payload)

    for part in payload.get("parts", []) or []:
        if part.get("mimeType") == "text/plain" and part.get("body", {}).get("data"):
            return decode_part_data(part)
    return ""


def extract_content(payload: dict) -> dict:
    """
    Walk the whole part tree collecting HTML, plain text and attachment count.

    The first ``text/html`` and first ``text/plain`` bodies in depth-first
    order are kept.

    Returns:
        Dict with ``html``, ``text`` and ``attachment_count``
    """
    found = {"html": "", "text": "", "attachment_count": 0}

    def walk(part: dict) -> None:
        body = part.get("body", {})
        if body.get("data"):
            mime_type = part.get("mimeType")
            if mime_type == "text/html" and not found["html"]:
                found["html"] = decode_part_data(part)
            elif mime_type == "text/plain" and not found["text"]:
                found["text"] = decode_part_data(part)

        if part.get("filename") and body.get("attachmentId"):
            found["attachment_count"] += 1

        for child in part.get("parts", []) or []:
            walk(child)

    walk(payload)
    return found


def html_to_text(html: str) -> str:
    """
    Approximate readable text from HTML.

    Line breaks become newlines, closing paragraphs become blank lines, all
    remaining tags are dropped and a small fixed set of entities is unescaped.
    This is not a general HTML renderer.
    """
    text = BR_TAG.sub("\n", html)
    text = P_CLOSE_TAG.sub("\n\n", text)
    text = ANY_TAG.sub("", text)
    for entity, replacement in HTML_ENTITIES:
        text = text.replace(entity, replacement)
    return text.strip()


def _attachment_info(part: dict, fallback_name: str) -> dict:
    body = part.get("body", {})
    return {
        "id": body["attachmentId"],
        "filename": part.get("filename") or fallback_name,
        "mimeType": part.get("mimeType") or "application/octet-stream",
        "size": body.get("size") or 0,
    }


def find_attachments(payload: dict) -> list[dict]:
    """
    Collect every part that has both a filename and an attachment id.

    Nested multipart containers are searched recursively. When the payload
    has no parts at all, the payload itself is returned if it is an
    attachment.

    Returns:
        List of ``{"id", "filename", "mimeType", "size"}`` dicts
    """
    attachments: list[dict] = []

    def walk(parts: Optional[list]) -> None:
        for index, part in enumerate(parts or []):
            if part.get("filename") and part.get("body", {}).get("attachmentId"):
                attachments.append(_attachment_info(part, f"attachment_{index}"))
            if part.get("parts"):
                walk(part["parts"])

    if payload.get("parts"):
        walk(payload["parts"])
    elif payload.get("filename") and payload.get("body", {}).get("attachmentId"):
        attachments.append(_attachment_info(payload, payload["filename"]))

    return attachments
