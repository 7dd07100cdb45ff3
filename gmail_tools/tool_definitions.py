from dataclasses import dataclass, field
from typing import Any, Dict, List, Type

from pydantic import BaseModel

from . import schemas


@dataclass
class ToolDefinition:
    name: str
    description: str  # Shown to the client in tool discovery
    schema: Type[BaseModel]  # Pydantic model for parameters
    advertised: bool = True  # Listed in tool discovery
    method_name: str = field(default="")  # Method name on GmailTools (defaults to tool name)

    def __post_init__(self):
        if not self.method_name:
            self.method_name = self.name

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema for the tool's arguments, using camelCase names."""
        schema = self.schema.model_json_schema(by_alias=True)
        schema.setdefault("properties", {})
        return schema

    def to_mcp(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


# ─────────────────────────────────────────────────────────────────────────────
# Tool Definitions
# ─────────────────────────────────────────────────────────────────────────────

TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "search_emails": ToolDefinition(
        name="search_emails",
        description="Search for emails using Gmail search syntax (read-only)",
        schema=schemas.SearchEmailsParams,
    ),
    "read_email": ToolDefinition(
        name="read_email",
        description="Read a specific email by ID (read-only)",
        schema=schemas.ReadEmailParams,
    ),
    "send_email": ToolDefinition(
        name="send_email",
        description="Send a new email (requires confirmation)",
        schema=schemas.SendEmailParams,
    ),
    "list_attachments": ToolDefinition(
        name="list_attachments",
        description="List all attachments in a specific email",
        schema=schemas.ListAttachmentsParams,
    ),
    "download_attachment": ToolDefinition(
        name="download_attachment",
        description="Download a specific attachment from an email",
        schema=schemas.DownloadAttachmentParams,
    ),
    "read_email_html": ToolDefinition(
        name="read_email_html",
        description="Read email with better HTML content extraction",
        schema=schemas.ReadEmailHtmlParams,
    ),
    "delete_email": ToolDefinition(
        name="delete_email",
        description="Permanently delete a specific email",
        schema=schemas.DeleteEmailParams,
    ),
    "empty_spam": ToolDefinition(
        name="empty_spam",
        description="Empty all emails from spam folder",
        schema=schemas.EmptySpamParams,
    ),
    # Callable by name but left out of discovery.
    "list_labels": ToolDefinition(
        name="list_labels",
        description="List Gmail labels with message counts",
        schema=schemas.ListLabelsParams,
        advertised=False,
    ),
}


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────

def get_advertised_tools() -> List[ToolDefinition]:
    """Definitions returned by tool discovery, in declaration order."""
    return [defn for defn in TOOL_DEFINITIONS.values() if defn.advertised]
