"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from config import ServerConfig
from gmail_tools.audit import AuditLogger
from services.gmail import GmailService


@pytest.fixture
def config(tmp_path):
    """Server config rooted in a temporary directory."""
    return ServerConfig.for_directory(tmp_path / "gmail-mcp")


@pytest.fixture
def audit(config):
    return AuditLogger(config.audit_log_path)


@pytest.fixture
def audit_lines(audit):
    """Callable returning the audit log as a list of lines."""
    def read():
        if not audit.log_path.exists():
            return []
        return audit.log_path.read_text(encoding="utf-8").splitlines()
    return read


@pytest.fixture
def gmail_api():
    """Stand-in for the googleapiclient Gmail v1 resource."""
    return MagicMock(name="gmail_api")


@pytest.fixture
def messages_api(gmail_api):
    """``gmail_api.users().messages()``"""
    return gmail_api.users.return_value.messages.return_value


@pytest.fixture
def gmail_service(gmail_api, audit):
    return GmailService(gmail_api, audit=audit)
