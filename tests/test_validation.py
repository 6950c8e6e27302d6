# Tests for static descriptor validation
import sys

from mcpcheck.models import ServerDescriptor
from mcpcheck.utils.validation import (
    validate_command_exists,
    validate_descriptor,
    validate_url,
)


class TestValidateCommandExists:
    """Tests for validate_command_exists function."""

    def test_valid_command_returns_none(self):
        """Test that existing command returns None."""
        assert validate_command_exists(sys.executable) is None

    def test_invalid_command_returns_error(self):
        """Test that non-existent command returns ValidationError."""
        result = validate_command_exists("definitely_not_a_real_command_xyz123")
        assert result is not None
        assert result.severity == "error"
        assert "definitely_not_a_real_command_xyz123" in result.message
        assert result.server_name == ""


class TestValidateUrl:
    """Tests for validate_url function."""

    def test_supported_schemes(self):
        """Test that http, https, ws and wss are accepted."""
        for url in ("http://localhost:8080/mcp", "https://api.example.com/sse",
                    "ws://localhost:9000", "wss://example.com/mcp"):
            assert validate_url(url) is None

    def test_bad_scheme(self):
        """Test that other schemes are rejected."""
        result = validate_url("ftp://example.com/mcp")
        assert result is not None
        assert "scheme" in result.message

    def test_missing_host(self):
        """Test that a URL without host is rejected."""
        result = validate_url("https:///mcp")
        assert result is not None
        assert "host" in result.message


class TestValidateDescriptor:
    """Tests for validate_descriptor function."""

    def test_valid_local_server(self):
        """Test a local server whose command exists."""
        descriptor = ServerDescriptor(name="local", command=sys.executable, args=["-m", "srv"])
        assert validate_descriptor(descriptor) == []

    def test_missing_command_binary(self):
        """Test a local server whose command is not on PATH."""
        descriptor = ServerDescriptor(name="broken", command="nonexistent_command_xyz")
        errors = validate_descriptor(descriptor)
        assert len(errors) == 1
        assert errors[0].severity == "error"
        assert errors[0].server_name == "broken"

    def test_neither_command_nor_url(self):
        """Test an entry with nothing to connect to."""
        errors = validate_descriptor(ServerDescriptor(name="empty"))
        assert [e.message for e in errors] == ["Missing command or url"]

    def test_unset_env_ref_warns(self, monkeypatch):
        """Test warnings for unset references in args and env."""
        monkeypatch.delenv("MCPCHECK_TEST_UNSET", raising=False)
        descriptor = ServerDescriptor(
            name="local",
            command=sys.executable,
            args=["${MCPCHECK_TEST_UNSET}/script.py"],
            env={"TOKEN": "${MCPCHECK_TEST_UNSET}"},
        )
        errors = validate_descriptor(descriptor)
        assert [e.severity for e in errors] == ["warning", "warning"]
        assert "args" in errors[0].message
        assert "env.TOKEN" in errors[1].message

    def test_remote_header_ref_warns(self, monkeypatch):
        """Test warnings for unset references in headers."""
        monkeypatch.delenv("MCPCHECK_TEST_TOKEN", raising=False)
        descriptor = ServerDescriptor(
            name="remote",
            url="https://example.com/mcp",
            headers={"Authorization": "Bearer ${MCPCHECK_TEST_TOKEN}"},
        )
        errors = validate_descriptor(descriptor)
        assert len(errors) == 1
        assert "headers.Authorization" in errors[0].message

    def test_remote_bad_url(self):
        """Test that a remote entry with a bad URL is an error."""
        errors = validate_descriptor(ServerDescriptor(name="r", url="gopher://x"))
        assert errors[0].severity == "error"
        assert errors[0].server_name == "r"
