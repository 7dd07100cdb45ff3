"""
Exceptions raised by the Gmail tool layer.

Every failure that reaches the MCP client is one of these, so the transport
can report it as an error result with a readable message.
"""


class GmailMcpError(Exception):
    """Base class for all tool-call failures."""


class RateLimitExceededError(GmailMcpError):
    """The request-rate budget for the current window is used up."""

    def __init__(self, message: str = "Rate limit exceeded. Please wait before making more requests."):
        super().__init__(message)


class AuthenticationError(GmailMcpError):
    """Gmail credentials could not be loaded or are unusable."""


class AuthenticationRequiredError(AuthenticationError):
    """No valid token is stored; the operator must run the auth flow."""


class ToolValidationError(GmailMcpError, ValueError):
    """Caller-supplied arguments are malformed or out of bounds."""


class UnsupportedToolError(GmailMcpError):
    """The requested tool name is not in the registry."""


class GmailApiError(GmailMcpError):
    """The Gmail API returned an error or an unusable response."""
