"""Tests for gmail_tools/registry.py and tool definitions."""

from unittest.mock import MagicMock

import pytest

from gmail_tools.errors import ToolValidationError, UnsupportedToolError
from gmail_tools.registry import GmailTools
from gmail_tools.tool_definitions import TOOL_DEFINITIONS, get_advertised_tools


@pytest.fixture
def tools(config):
    return GmailTools(config.downloads_dir)


@pytest.fixture
def gmail():
    """GmailService stand-in recording every call."""
    return MagicMock(name="gmail_service")


class TestToolDefinitions:

    def test_every_definition_is_bound(self, tools):
        assert set(tools.get_tool_names()) == set(TOOL_DEFINITIONS)
        for name in TOOL_DEFINITIONS:
            assert callable(tools.get_tool_function(name))

    def test_discovery_lists_eight_tools_without_labels(self, tools):
        names = [tool["name"] for tool in tools.get_mcp_tools()]
        assert names == [
            "search_emails",
            "read_email",
            "send_email",
            "list_attachments",
            "download_attachment",
            "read_email_html",
            "delete_email",
            "empty_spam",
        ]
        assert "list_labels" not in names
        assert TOOL_DEFINITIONS["list_labels"].advertised is False

    def test_input_schemas_use_camel_case(self):
        for defn in get_advertised_tools():
            schema = defn.input_schema()
            assert schema["type"] == "object"
            assert "properties" in schema

        read = TOOL_DEFINITIONS["read_email"].input_schema()
        assert "messageId" in read["properties"]
        assert read["required"] == ["messageId"]

        download = TOOL_DEFINITIONS["download_attachment"].input_schema()
        assert set(download["required"]) == {"messageId", "attachmentId"}

    def test_search_schema_advertises_cap(self):
        props = TOOL_DEFINITIONS["search_emails"].input_schema()["properties"]
        assert props["maxResults"]["maximum"] == 50
        assert props["maxResults"]["default"] == 10

    def test_empty_spam_schema_requires_confirm(self):
        schema = TOOL_DEFINITIONS["empty_spam"].input_schema()

        assert schema["required"] == ["confirm"]
        assert "confirm" in schema["properties"]

    def test_send_schema_lengths(self):
        props = TOOL_DEFINITIONS["send_email"].input_schema()["properties"]
        assert props["subject"]["maxLength"] == 255
        assert props["body"]["maxLength"] == 10000
        assert props["to"]["type"] == "array"


class TestExecuteTool:

    def test_unknown_tool(self, tools, gmail):
        with pytest.raises(UnsupportedToolError, match="Unknown tool: archive_everything"):
            tools.execute_tool(gmail, "archive_everything", {})

    def test_search_sanitizes_query(self, tools, gmail):
        gmail.search_messages.return_value = {"resultCount": 0}

        tools.execute_tool(gmail, "search_emails", {"query": " <from:boss@example.com> ", "maxResults": 20})

        gmail.search_messages.assert_called_once_with(query="from:boss@example.com", max_results=20)

    def test_search_defaults_and_snake_case(self, tools, gmail):
        tools.execute_tool(gmail, "search_emails", {"query": "is:unread"})
        gmail.search_messages.assert_called_with(query="is:unread", max_results=10)

        tools.execute_tool(gmail, "search_emails", {"query": "is:unread", "max_results": 3})
        gmail.search_messages.assert_called_with(query="is:unread", max_results=3)

    def test_search_requires_query(self, tools, gmail):
        with pytest.raises(ToolValidationError, match="query"):
            tools.execute_tool(gmail, "search_emails", {})
        gmail.search_messages.assert_not_called()

    def test_message_id_must_be_string(self, tools, gmail):
        with pytest.raises(ToolValidationError, match="messageId"):
            tools.execute_tool(gmail, "read_email", {"messageId": 123})
        gmail.get_message.assert_not_called()

    def test_read_routes(self, tools, gmail):
        tools.execute_tool(gmail, "read_email", {"messageId": "m1"})
        tools.execute_tool(gmail, "read_email_html", {"messageId": "m2"})
        tools.execute_tool(gmail, "list_attachments", {"messageId": "m3"})
        tools.execute_tool(gmail, "delete_email", {"messageId": "m4"})
        tools.execute_tool(gmail, "list_labels", {})

        gmail.get_message.assert_called_once_with(message_id="m1")
        gmail.get_message_html.assert_called_once_with(message_id="m2")
        gmail.list_attachments.assert_called_once_with(message_id="m3")
        gmail.delete_message.assert_called_once_with(message_id="m4")
        gmail.list_labels.assert_called_once_with()


class TestSendEmail:

    def _args(self, **overrides):
        args = {"to": ["a@example.com"], "subject": "Hi", "body": "Body"}
        args.update(overrides)
        return args

    def test_subject_over_limit_is_rejected(self, tools, gmail):
        with pytest.raises(ToolValidationError, match="subject"):
            tools.execute_tool(gmail, "send_email", self._args(subject="s" * 256))

        assert gmail.method_calls == []

    def test_subject_at_limit_is_accepted(self, tools, gmail):
        tools.execute_tool(gmail, "send_email", self._args(subject="s" * 255))
        gmail.send_message.assert_called_once()

    @pytest.mark.parametrize("subject", ["Hi\r\nBcc: x@evil.example", "line\nbreak", "carriage\rreturn"])
    def test_subject_line_breaks_rejected(self, tools, gmail, subject):
        with pytest.raises(ToolValidationError, match="line breaks"):
            tools.execute_tool(gmail, "send_email", self._args(subject=subject))

        assert gmail.method_calls == []

    def test_body_over_limit_is_rejected(self, tools, gmail):
        with pytest.raises(ToolValidationError, match="body"):
            tools.execute_tool(gmail, "send_email", self._args(body="b" * 10001))
        assert gmail.method_calls == []

    def test_empty_recipients_rejected(self, tools, gmail):
        with pytest.raises(ToolValidationError, match="to"):
            tools.execute_tool(gmail, "send_email", self._args(to=[]))

    def test_recipients_must_be_array(self, tools, gmail):
        with pytest.raises(ToolValidationError):
            tools.execute_tool(gmail, "send_email", self._args(to="a@example.com"))

    @pytest.mark.parametrize("field", ["to", "cc", "bcc"])
    def test_invalid_address_rejected(self, tools, gmail, field):
        args = self._args(**{field: ["a@example.com", "not-an-email"]})

        with pytest.raises(ToolValidationError, match="Invalid email address: not-an-email"):
            tools.execute_tool(gmail, "send_email", args)
        assert gmail.method_calls == []

    def test_sanitizes_subject_and_body(self, tools, gmail):
        tools.execute_tool(
            gmail,
            "send_email",
            self._args(subject=" <b>Hi</b> ", body="<script>x</script>  ", cc=["c@example.com"]),
        )

        gmail.send_message.assert_called_once_with(
            to=["a@example.com"],
            subject="bHi/b",
            body="scriptx/script",
            cc=["c@example.com"],
            bcc=[],
        )


class TestDownloadAttachment:

    def test_passes_downloads_dir(self, tools, gmail, config):
        tools.execute_tool(
            gmail, "download_attachment",
            {"messageId": "m1", "attachmentId": "a1", "filename": "report.pdf"},
        )

        gmail.download_attachment.assert_called_once_with(
            message_id="m1",
            attachment_id="a1",
            downloads_dir=config.downloads_dir,
            filename="report.pdf",
        )

    @pytest.mark.parametrize("filename", ["../../.bashrc", "/etc/passwd", "dir/file", ".."])
    def test_rejects_path_like_filenames(self, tools, gmail, filename):
        with pytest.raises(ToolValidationError, match="plain file name"):
            tools.execute_tool(
                gmail, "download_attachment",
                {"messageId": "m1", "attachmentId": "a1", "filename": filename},
            )
        assert gmail.method_calls == []


class TestEmptySpam:

    def test_refuses_without_confirmation(self, tools, gmail):
        result = tools.execute_tool(gmail, "empty_spam", {"confirm": False})

        assert result["error"] == "Confirmation required"
        assert "confirm: true" in result["message"]
        assert gmail.method_calls == []

    def test_confirmed_runs(self, tools, gmail):
        gmail.empty_spam.return_value = {"deletedCount": 3}

        result = tools.execute_tool(gmail, "empty_spam", {"confirm": True})

        gmail.empty_spam.assert_called_once_with()
        assert result == {"deletedCount": 3}

    @pytest.mark.parametrize("value", ["true", 1, "yes"])
    def test_confirm_must_be_boolean(self, tools, gmail, value):
        with pytest.raises(ToolValidationError, match="confirm"):
            tools.execute_tool(gmail, "empty_spam", {"confirm": value})
        assert gmail.method_calls == []

    def test_missing_confirmation_is_refused(self, tools, gmail):
        result = tools.execute_tool(gmail, "empty_spam", {})

        assert result == {
            "error": "Confirmation required",
            "message": "To empty spam, you must set confirm: true",
            "warning": "This will permanently delete ALL emails in spam folder",
        }
        assert gmail.method_calls == []
