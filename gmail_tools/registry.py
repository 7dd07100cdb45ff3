"""
Gmail tools registry.

Provides the GmailTools class that wraps GmailService methods for tool calls.
Uses tool_definitions.py
"""

from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from .errors import ToolValidationError, UnsupportedToolError
from .tool_definitions import TOOL_DEFINITIONS, get_advertised_tools
from .validation import sanitize_input


def format_validation_error(name: str, error: ValidationError) -> str:
    """Flatten a pydantic error into one line naming each bad field."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return f"Invalid arguments for {name}: " + "; ".join(problems)


class GmailTools:
    """
    Collection of tool wrapper functions.
    Validates arguments, sanitizes free text, and delegates to the Gmail
    service bound to the current session.
    """

    def __init__(self, downloads_dir: Path):
        """Initialize tools with the directory attachments are saved to."""
        self.downloads_dir = Path(downloads_dir)

        # Build tool registry from definitions
        self._tool_registry = self._build_tool_registry()

    def _build_tool_registry(self) -> dict[str, dict]:
        """
        Build registry mapping tool names to functions and schemas.

        Uses TOOL_DEFINITIONS as the source of truth, binding to instance methods.
        """
        registry = {}

        for name, defn in TOOL_DEFINITIONS.items():
            method = getattr(self, defn.method_name, None)
            if method is None:
                raise AttributeError(
                    f"Tool '{name}' references method '{defn.method_name}' "
                    f"which does not exist on GmailTools"
                )

            registry[name] = {
                "function": method,
                "model": defn.schema,
                "description": defn.description,
            }

        return registry

    # ─────────────────────────────────────────────────────────────────────
    # Registry Access Methods
    # ─────────────────────────────────────────────────────────────────────

    def get_tool_names(self) -> list[str]:
        """Get list of all dispatchable tool names."""
        return list(self._tool_registry.keys())

    def get_tool_function(self, name: str) -> Optional[Callable]:
        """Get the function for a tool by name."""
        tool = self._tool_registry.get(name)
        return tool["function"] if tool else None

    def get_mcp_tools(self) -> List[dict]:
        """Advertised tools in MCP discovery format."""
        return [defn.to_mcp() for defn in get_advertised_tools()]

    def validate_arguments(self, name: str, arguments: Optional[dict]) -> dict:
        """
        Validate raw arguments for a tool.

        Returns:
            Keyword arguments (snake_case) for the tool function

        Raises:
            UnsupportedToolError: unknown tool name
            ToolValidationError: arguments fail the tool's schema
        """
        tool = self._tool_registry.get(name)
        if not tool:
            raise UnsupportedToolError(f"Unknown tool: {name}")

        try:
            params = tool["model"].model_validate(arguments or {})
        except ValidationError as e:
            raise ToolValidationError(format_validation_error(name, e)) from e

        return params.model_dump()

    def execute_tool(self, gmail, name: str, arguments: Optional[dict]) -> dict:
        """
        Execute a tool by name with given arguments.

        Args:
            gmail: GmailService of the authenticated session
            name: Tool name
            arguments: Raw arguments from the client

        Returns:
            Tool result payload
        """
        params = self.validate_arguments(name, arguments)
        return self._tool_registry[name]["function"](gmail, **params)

    # ─────────────────────────────────────────────────────────────────────
    # Gmail Tools
    # ─────────────────────────────────────────────────────────────────────

    def search_emails(self, gmail, query: str, max_results: int = 10) -> dict:
        """Search emails using Gmail search syntax."""
        return gmail.search_messages(query=sanitize_input(query), max_results=max_results)

    def read_email(self, gmail, message_id: str) -> dict:
        """Read an email's headers and plain-text body."""
        return gmail.get_message(message_id=message_id)

    def read_email_html(self, gmail, message_id: str) -> dict:
        """Read an email, deriving text from HTML when needed."""
        return gmail.get_message_html(message_id=message_id)

    def list_labels(self, gmail) -> dict:
        """List mailbox labels."""
        return gmail.list_labels()

    def list_attachments(self, gmail, message_id: str) -> dict:
        """List attachments of an email."""
        return gmail.list_attachments(message_id=message_id)

    def download_attachment(
        self,
        gmail,
        message_id: str,
        attachment_id: str,
        filename: Optional[str] = None,
    ) -> dict:
        """Save an attachment into the downloads directory."""
        return gmail.download_attachment(
            message_id=message_id,
            attachment_id=attachment_id,
            downloads_dir=self.downloads_dir,
            filename=filename,
        )

    def send_email(
        self,
        gmail,
        to: list[str],
        subject: str,
        body: str,
        cc: Optional[list[str]] = None,
        bcc: Optional[list[str]] = None,
    ) -> dict:
        """Send an email with sanitized subject and body."""
        return gmail.send_message(
            to=to,
            subject=sanitize_input(subject),
            body=sanitize_input(body),
            cc=cc,
            bcc=bcc,
        )

    def delete_email(self, gmail, message_id: str) -> dict:
        """Permanently delete an email."""
        return gmail.delete_message(message_id=message_id)

    def empty_spam(self, gmail, confirm: Optional[bool] = None) -> dict:
        """Empty the spam folder once explicitly confirmed."""
        if not confirm:
            return {
                "error": "Confirmation required",
                "message": "To empty spam, you must set confirm: true",
                "warning": "This will permanently delete ALL emails in spam folder",
            }
        return gmail.empty_spam()
