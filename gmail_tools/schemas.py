from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

from .validation import is_safe_filename, validate_email

# =============================================================================
# Pydantic Models for Tool Parameters
# =============================================================================
#
# Tool arguments arrive in camelCase from MCP clients; fields are snake_case
# with camelCase aliases, and either spelling is accepted.

MAX_SUBJECT_LENGTH = 255
MAX_BODY_LENGTH = 10000
MAX_SEARCH_RESULTS = 50


class ToolParams(BaseModel):
    """Base for all tool parameter models."""
    model_config = ConfigDict(populate_by_name=True)


class MessageIdParams(ToolParams):
    """Parameters for tools addressing a single message."""
    message_id: StrictStr = Field(..., alias="messageId", min_length=1, description="Email message ID")


class SearchEmailsParams(ToolParams):
    """Parameters for searching emails."""
    query: StrictStr = Field(..., min_length=1, description="Gmail search query")
    max_results: int = Field(
        10,
        alias="maxResults",
        ge=1,
        description="Maximum number of emails to return (capped at 50)",
        json_schema_extra={"maximum": MAX_SEARCH_RESULTS},
    )


class ReadEmailParams(MessageIdParams):
    """Parameters for reading an email."""


class ReadEmailHtmlParams(MessageIdParams):
    """Parameters for reading an email with HTML extraction."""


class ListAttachmentsParams(MessageIdParams):
    """Parameters for listing an email's attachments."""


class DeleteEmailParams(MessageIdParams):
    """Parameters for permanently deleting an email."""
    message_id: StrictStr = Field(..., alias="messageId", min_length=1, description="Email message ID to delete")


class DownloadAttachmentParams(MessageIdParams):
    """Parameters for downloading an attachment."""
    attachment_id: StrictStr = Field(..., alias="attachmentId", min_length=1, description="Attachment ID")
    filename: Optional[StrictStr] = Field(
        None,
        description="Optional file name to save as (no directories)",
    )

    @field_validator("filename")
    @classmethod
    def _bare_filename(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_safe_filename(value):
            raise ValueError("filename must be a plain file name without path separators")
        return value


class SendEmailParams(ToolParams):
    """Parameters for sending an email."""
    to: list[StrictStr] = Field(..., min_length=1, description="Recipient email addresses")
    subject: StrictStr = Field(..., min_length=1, max_length=MAX_SUBJECT_LENGTH, description="Subject line")
    body: StrictStr = Field(..., min_length=1, max_length=MAX_BODY_LENGTH, description="Plain-text body")
    cc: list[StrictStr] = Field(default_factory=list, description="CC email addresses")
    bcc: list[StrictStr] = Field(default_factory=list, description="BCC email addresses")

    @field_validator("subject")
    @classmethod
    def _single_line_subject(cls, value: str) -> str:
        if "\r" in value or "\n" in value:
            raise ValueError("subject must not contain line breaks")
        return value

    @field_validator("to", "cc", "bcc")
    @classmethod
    def _valid_addresses(cls, addresses: list[str]) -> list[str]:
        for address in addresses:
            if not validate_email(address):
                raise ValueError(f"Invalid email address: {address}")
        return addresses


class EmptySpamParams(ToolParams):
    """Parameters for emptying the spam folder."""
    # Advertised as required; a call without it still gets the refusal payload.
    model_config = ConfigDict(populate_by_name=True, json_schema_extra={"required": ["confirm"]})

    confirm: Optional[StrictBool] = Field(None, description="Confirmation to proceed with deletion")


class ListLabelsParams(ToolParams):
    """Parameters for listing labels (no parameters needed)."""
    pass
