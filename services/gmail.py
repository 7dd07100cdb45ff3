"""Google Gmail service module for searching, reading, sending and deleting email.

Based on Google Workspace API quickstart example:
https://github.com/googleworkspace/python-samples/tree/main/gmail/quickstart
"""

import base64
import logging
import time
from pathlib import Path
from typing import Optional

from googleapiclient.errors import HttpError

from gmail_tools.audit import utc_timestamp
from gmail_tools.errors import GmailApiError
from . import mime

logger = logging.getLogger(__name__)

SEARCH_RESULT_CAP = 50
READ_BODY_LIMIT = 5000
HTML_TEXT_LIMIT = 10000
SPAM_LIST_LIMIT = 500
SPAM_BATCH_SIZE = 50
SPAM_BATCH_PAUSE_SECONDS = 1.0


def build_raw_message(
    to: list[str],
    subject: str,
    body: str,
    cc: Optional[list[str]] = None,
    bcc: Optional[list[str]] = None,
) -> str:
    """
    Assemble a plain-text RFC 5322 message, base64url encoded for ``send``.

    Address headers are written exactly as given; they have already passed
    address validation and must reach Gmail unchanged.
    """
    lines = [f"To: {', '.join(to)}"]
    if cc:
        lines.append(f"Cc: {', '.join(cc)}")
    if bcc:
        lines.append(f"Bcc: {', '.join(bcc)}")
    lines.append(f"Subject: {subject}")
    lines.append("MIME-Version: 1.0")
    lines.append("Content-Type: text/plain; charset=utf-8")
    lines.append("Content-Transfer-Encoding: 8bit")
    lines.append("")
    lines.append(body)

    message = "\r\n".join(lines).encode("utf-8")
    return base64.urlsafe_b64encode(message).decode("ascii")


def _api_error(action: str, error: HttpError, message_id: Optional[str] = None) -> GmailApiError:
    if message_id and error.resp.status == 404:
        return GmailApiError(f"Failed to {action}: message '{message_id}' not found.")
    return GmailApiError(f"Failed to {action}: {error}")


class GmailService:
    """Handles Gmail API interactions for the tool layer."""

    def __init__(self, service, audit=None):
        """
        Initialize with an authenticated Gmail service.

        Args:
            service: ``googleapiclient`` Gmail v1 resource
            audit: Optional AuditLogger receiving per-operation records
        """
        self.service = service
        self.audit = audit

    def _audit(self, level: str, message: str) -> None:
        if self.audit is not None:
            self.audit.log(level, message)

    def _messages(self):
        return self.service.users().messages()

    def _summary(self, message_id: str, msg: dict) -> dict:
        headers = mime.get_headers(msg)
        return {
            "id": message_id,
            "threadId": msg.get("threadId", ""),
            "subject": headers.get("Subject", ""),
            "from": headers.get("From", ""),
            "to": mime.split_addresses(headers.get("To", "")),
            "date": headers.get("Date", ""),
            "snippet": msg.get("snippet", ""),
        }

    def search_messages(self, query: str, max_results: int = 10) -> dict:
        """
        Search messages using Gmail search syntax.

        One list call, then one metadata fetch per hit for the
        From/To/Subject/Date headers.

        Args:
            query: Already-sanitized Gmail search query
            max_results: Requested count, capped at 50

        Returns:
            Dict with the query, result count and message summaries
        """
        try:
            results = (
                self._messages()
                .list(userId="me", q=query, maxResults=min(max_results, SEARCH_RESULT_CAP))
                .execute()
            )

            messages = []
            for item in results.get("messages", []):
                msg_id = item.get("id")
                if not msg_id:
                    continue
                msg = (
                    self._messages()
                    .get(
                        userId="me",
                        id=msg_id,
                        format="metadata",
                        metadataHeaders=["From", "To", "Subject", "Date"],
                    )
                    .execute()
                )
                messages.append(self._summary(msg_id, msg))

            return {
                "query": query,
                "resultCount": len(messages),
                "messages": messages,
            }

        except HttpError as error:
            raise _api_error("search emails", error) from error

    def _get_full(self, message_id: str, action: str) -> dict:
        try:
            return (
                self._messages()
                .get(userId="me", id=message_id, format="full")
                .execute()
            )
        except HttpError as error:
            raise _api_error(action, error, message_id) from error

    def get_message(self, message_id: str) -> dict:
        """
        Get a message with its plain-text body.

        Only top-level parts are scanned for the body, which is truncated to
        5000 characters.
        """
        msg = self._get_full(message_id, "read email")
        body = mime.extract_plain_body(msg.get("payload", {}))

        result = self._summary(message_id, msg)
        result["body"] = body[:READ_BODY_LIMIT]
        return result

    def get_message_html(self, message_id: str) -> dict:
        """
        Get a message with readable text derived from its full part tree.

        Falls back to an HTML-to-text approximation when there is no plain
        part. Text is truncated to 10000 characters.
        """
        msg = self._get_full(message_id, "read email HTML")
        content = mime.extract_content(msg.get("payload", {}))

        readable = content["text"]
        if not readable and content["html"]:
            readable = mime.html_to_text(content["html"])

        result = self._summary(message_id, msg)
        result.update({
            "textContent": readable[:HTML_TEXT_LIMIT],
            "hasHtml": bool(content["html"]),
            "attachmentCount": content["attachment_count"],
            "contentType": "html" if content["html"] else "text",
        })
        return result

    def list_labels(self) -> dict:
        """List the mailbox labels with their message counts."""
        try:
            response = self.service.users().labels().list(userId="me").execute()
        except HttpError as error:
            raise _api_error("list labels", error) from error

        labels = [
            {
                "id": label.get("id"),
                "name": label.get("name"),
                "type": label.get("type"),
                "messagesTotal": label.get("messagesTotal"),
                "messagesUnread": label.get("messagesUnread"),
            }
            for label in response.get("labels", [])
        ]
        return {"labels": labels, "count": len(labels)}

    def list_attachments(self, message_id: str) -> dict:
        """List attachment metadata for a message."""
        msg = self._get_full(message_id, "list attachments")
        attachments = mime.find_attachments(msg.get("payload", {}))

        self._audit("INFO", f"Listed {len(attachments)} attachments for message {message_id}")

        return {
            "messageId": message_id,
            "attachmentCount": len(attachments),
            "attachments": attachments,
        }

    def download_attachment(
        self,
        message_id: str,
        attachment_id: str,
        downloads_dir: Path,
        filename: Optional[str] = None,
    ) -> dict:
        """
        Fetch an attachment and write it into ``downloads_dir``.

        Args:
            message_id: Gmail message ID
            attachment_id: Attachment ID from list_attachments
            downloads_dir: Directory the file is written to (created if needed)
            filename: Bare file name to save as; defaults to a timestamped name

        Returns:
            Dict with the resolved path and the number of bytes written
        """
        try:
            attachment = (
                self._messages()
                .attachments()
                .get(userId="me", messageId=message_id, id=attachment_id)
                .execute()
            )
        except HttpError as error:
            self._audit("ERROR", f"Failed to download attachment: {error}")
            raise _api_error("download attachment", error, message_id) from error

        data = attachment.get("data")
        if not data:
            self._audit("ERROR", "Failed to download attachment: no attachment data received")
            raise GmailApiError("Failed to download attachment: no attachment data received")

        content = mime.decode_base64url(data)
        stamp = utc_timestamp().replace(":", "-").replace(".", "-")
        final_name = filename or f"attachment_{stamp}"
        file_path = Path(downloads_dir) / final_name

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        except OSError as error:
            self._audit("ERROR", f"Failed to download attachment: {error}")
            raise GmailApiError(f"Failed to download attachment: {error}") from error

        self._audit(
            "INFO",
            f"Downloaded attachment {attachment_id} as {final_name} ({len(content)} bytes)",
        )

        return {
            "success": True,
            "messageId": message_id,
            "attachmentId": attachment_id,
            "filename": final_name,
            "filePath": str(file_path),
            "size": len(content),
            "downloadedAt": utc_timestamp(),
        }

    def send_message(
        self,
        to: list[str],
        subject: str,
        body: str,
        cc: Optional[list[str]] = None,
        bcc: Optional[list[str]] = None,
    ) -> dict:
        """
        Send a plain-text message.

        Args:
            to: Validated recipient addresses
            subject: Sanitized subject line
            body: Sanitized plain-text body
            cc: Optional CC addresses
            bcc: Optional BCC addresses

        Returns:
            Dict with the sent message ID
        """
        cc = cc or []
        bcc = bcc or []

        self._audit("WARN", f"Email send attempt - To: {', '.join(to)}, Subject: {subject}")

        raw = build_raw_message(to, subject, body, cc=cc, bcc=bcc)

        try:
            sent = (
                self._messages()
                .send(userId="me", body={"raw": raw})
                .execute()
            )
        except HttpError as error:
            self._audit("ERROR", f"Email send failed: {error}")
            raise _api_error("send email", error) from error

        self._audit("INFO", f"Email sent successfully - ID: {sent.get('id')}")

        return {
            "success": True,
            "messageId": sent.get("id"),
            "to": to,
            "subject": subject,
            "timestamp": utc_timestamp(),
        }

    def delete_message(self, message_id: str) -> dict:
        """
        Permanently delete a message (no trash step).

        Metadata is fetched first so the audit record names what was removed.
        """
        try:
            msg = (
                self._messages()
                .get(
                    userId="me",
                    id=message_id,
                    format="metadata",
                    metadataHeaders=["From", "Subject", "Date"],
                )
                .execute()
            )
            headers = mime.get_headers(msg)
            subject = headers.get("Subject", "")
            sender = headers.get("From", "")

            self._messages().delete(userId="me", id=message_id).execute()

        except HttpError as error:
            self._audit("ERROR", f"Failed to delete email {message_id}: {error}")
            raise _api_error("delete email", error, message_id) from error

        self._audit("WARN", f"Email deleted - ID: {message_id}, Subject: {subject}, From: {sender}")

        return {
            "success": True,
            "messageId": message_id,
            "subject": subject,
            "from": sender,
            "deletedAt": utc_timestamp(),
            "action": "permanently_deleted",
        }

    def empty_spam(
        self,
        batch_size: int = SPAM_BATCH_SIZE,
        pause_seconds: float = SPAM_BATCH_PAUSE_SECONDS,
    ) -> dict:
        """
        Permanently delete up to 500 messages from the spam folder.

        Messages are deleted one at a time in batches with a fixed pause
        between batches. A failed delete is audited and skipped; the result
        reports how many of the found messages were actually deleted.
        """
        self._audit("WARN", "Starting spam folder cleanup - USER INITIATED")

        try:
            response = (
                self._messages()
                .list(userId="me", q="in:spam", maxResults=SPAM_LIST_LIMIT)
                .execute()
            )
        except HttpError as error:
            self._audit("ERROR", f"Failed to empty spam folder: {error}")
            raise _api_error("empty spam folder", error) from error

        spam = response.get("messages", [])
        if not spam:
            self._audit("INFO", "Spam folder is already empty")
            return {
                "success": True,
                "message": "Spam folder is already empty",
                "deletedCount": 0,
            }

        deleted = 0
        for start in range(0, len(spam), batch_size):
            for item in spam[start:start + batch_size]:
                msg_id = item.get("id")
                if not msg_id:
                    continue
                try:
                    self._messages().delete(userId="me", id=msg_id).execute()
                    deleted += 1
                except HttpError as error:
                    logger.warning("Failed to delete spam message %s: %s", msg_id, error)
                    self._audit("ERROR", f"Failed to delete spam email {msg_id}: {error}")

            if start + batch_size < len(spam):
                time.sleep(pause_seconds)

        self._audit("WARN", f"Spam cleanup completed - Deleted {deleted} emails")

        return {
            "success": True,
            "message": "Spam folder successfully emptied",
            "totalFound": len(spam),
            "deletedCount": deleted,
            "failedCount": len(spam) - deleted,
            "completedAt": utc_timestamp(),
        }
