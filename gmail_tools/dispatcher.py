"""
Tool-call dispatcher.

Every call goes through the same sequence: rate limit, authenticated session,
audit record, validation and routing, and an error audit record if the
handler raises. Calls run one at a time; nothing here is retried.
"""

import json
import logging
from typing import Any, Optional

from .audit import AuditLogger
from .errors import RateLimitExceededError
from .rate_limiter import DEFAULT_CLIENT_ID, RateLimiter
from .registry import GmailTools

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Routes tool calls from the MCP transport to Gmail tools."""

    def __init__(
        self,
        session,
        tools: GmailTools,
        rate_limiter: RateLimiter,
        audit: AuditLogger,
        client_id: str = DEFAULT_CLIENT_ID,
    ):
        """
        Args:
            session: GmailSession providing the authenticated Gmail service
            tools: Tool registry that validates and executes calls
            rate_limiter: Limiter shared by all calls of this dispatcher
            audit: Audit log receiving call records
            client_id: Identifier charged against the rate limiter
        """
        self.session = session
        self.tools = tools
        self.rate_limiter = rate_limiter
        self.audit = audit
        self.client_id = client_id

    def list_tools(self) -> list[dict]:
        """Advertised tools for discovery."""
        return self.tools.get_mcp_tools()

    def call_tool(self, name: str, arguments: Optional[dict] = None) -> dict[str, Any]:
        """
        Execute one tool call end to end.

        Raises:
            RateLimitExceededError: budget for the window is used up
            AuthenticationError: no usable Gmail session
            ToolValidationError: arguments rejected before any API call
            UnsupportedToolError: unknown tool name
            GmailApiError: the Gmail API call failed
        """
        arguments = arguments or {}

        if not self.rate_limiter.allow(self.client_id):
            raise RateLimitExceededError()

        gmail = self.session.ensure_authenticated()

        self.audit.info(f"Tool called: {name} with args: {json.dumps(arguments, default=str)}")
        logger.info("Executing tool: %s", name)

        try:
            return self.tools.execute_tool(gmail, name, arguments)
        except Exception as exc:
            self.audit.error(f"Tool {name} failed: {exc}")
            logger.error("Tool %s failed: %s", name, exc)
            raise
