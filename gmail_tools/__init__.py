"""
Gmail tools module.

Provides the tool registry, dispatcher and the security helpers around it
(rate limiting, validation, audit logging). The authenticated session lives
in ``gmail_tools.session``.
"""

from .audit import AuditLogger
from .dispatcher import ToolDispatcher
from .errors import (
    AuthenticationError,
    AuthenticationRequiredError,
    GmailApiError,
    GmailMcpError,
    RateLimitExceededError,
    ToolValidationError,
    UnsupportedToolError,
)
from .rate_limiter import RateLimiter
from .registry import GmailTools
from .tool_definitions import (
    TOOL_DEFINITIONS,
    ToolDefinition,
    get_advertised_tools,
)
from .validation import is_safe_filename, sanitize_input, validate_email

__all__ = [
    # Dispatch
    "ToolDispatcher",
    "GmailTools",

    # Security helpers
    "AuditLogger",
    "RateLimiter",
    "validate_email",
    "sanitize_input",
    "is_safe_filename",

    # Tool definitions
    "TOOL_DEFINITIONS",
    "ToolDefinition",
    "get_advertised_tools",

    # Errors
    "GmailMcpError",
    "RateLimitExceededError",
    "AuthenticationError",
    "AuthenticationRequiredError",
    "ToolValidationError",
    "UnsupportedToolError",
    "GmailApiError",
]
