# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailtask test suite. The SMTP transport is always
# mocked; no test opens a network connection.
# =============================================================================

import pytest
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from mailtask.config import SystemConfig
from mailtask.core import MailDefaults, SmtpConfig, SmtpOrigin
from mailtask.resolve import TaskParams
from mailtask.secrets import MappingSecretProvider
from mailtask.workspace import LocalWorkspace


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def workspace(temp_dir):
    """A workspace with a body template and two attachment files."""
    (temp_dir / "reports").mkdir()
    (temp_dir / "reports" / "q1.csv").write_bytes(b"quarter,total\nq1,100\n")
    (temp_dir / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
    (temp_dir / "body.txt").write_text("Hello ${name},\nsee attached.\n", encoding="utf-8")
    return LocalWorkspace(temp_dir)


@pytest.fixture
def system_smtp():
    """The operator's SMTP endpoint, with trusted credentials."""
    return SmtpConfig(
        host="smtp.internal.example.com",
        port=587,
        start_tls=True,
        ssl=False,
        debug=False,
        username="operator",
        password="operator-secret",
        origin=SmtpOrigin.SYSTEM,
    )


@pytest.fixture
def system_config(system_smtp):
    """System config with defaults and a system SMTP endpoint."""
    return SystemConfig(
        mail_defaults=MailDefaults(subject="Report", from_address="workflow@example.com"),
        smtp=system_smtp,
    )


@pytest.fixture
def empty_system_config():
    """System config with no mail settings at all."""
    return SystemConfig()


@pytest.fixture
def no_secrets():
    return MappingSecretProvider()


@pytest.fixture
def make_params(no_secrets):
    """Build TaskParams from a dict and optional secrets."""
    def _make(raw, secrets=None):
        return TaskParams(raw, secrets if secrets is not None else no_secrets)
    return _make


@pytest.fixture
def mock_smtp():
    """Patch aiosmtplib.SMTP; yields the mocked class (client is .return_value)."""
    with patch("mailtask.smtp.session.aiosmtplib.SMTP") as smtp_class:
        client = MagicMock()
        client.connect = AsyncMock()
        client.login = AsyncMock()
        client.send_message = AsyncMock(return_value=({}, "OK"))
        client.quit = AsyncMock()
        client.is_connected = True
        smtp_class.return_value = client
        yield smtp_class
