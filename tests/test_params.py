# =============================================================================
# TaskParams / Secret Access Tests
# =============================================================================

from unittest.mock import patch

import pytest
from keyring.errors import KeyringError

from mailtask.errors import ConfigurationError
from mailtask.resolve import MAIL_SECRET_ACCESS, TaskParams
from mailtask.secrets import KeyringSecretProvider, MappingSecretProvider
from mailtask.smtp import MailSender


class TestLookupOrder:

    def test_secret_wins_over_plain(self):
        params = TaskParams({"host": "plain.example"}, MappingSecretProvider({"host": "secret.example"}))
        assert params.get("host") == "secret.example"

    def test_plain_used_without_secret(self):
        params = TaskParams({"host": "plain.example"}, MappingSecretProvider())
        assert params.get("host") == "plain.example"

    def test_top_level_wins_over_mail_scope(self):
        params = TaskParams({"subject": "task", "mail": {"subject": "scoped"}}, MappingSecretProvider())
        assert params.get("subject") == "task"

    def test_mail_scope_fallback(self):
        params = TaskParams({"mail": {"subject": "scoped"}}, MappingSecretProvider())
        assert params.get("subject") == "scoped"

    def test_non_secret_keys_never_read_from_secrets(self):
        params = TaskParams({}, MappingSecretProvider({"to": "sneaky@example.com"}))
        assert params.get("to") is None

    def test_password_is_secret_only(self):
        params = TaskParams({"password": "plain"}, MappingSecretProvider())
        assert params.get("password") is None
        assert params.plain_only("password") == "plain"


class TestSecretAccessList:

    def test_declaration(self):
        assert MAIL_SECRET_ACCESS.scope == "mail"
        for key in ("host", "port", "tls", "ssl", "username"):
            assert MAIL_SECRET_ACCESS.allows_secret(key)
            assert MAIL_SECRET_ACCESS.allows_plain(key)
        assert MAIL_SECRET_ACCESS.allows_secret("password")
        assert not MAIL_SECRET_ACCESS.allows_plain("password")

    def test_sender_exposes_declaration(self):
        assert MailSender.SECRET_ACCESS is MAIL_SECRET_ACCESS


class TestKeyringSecretProvider:

    @patch("mailtask.secrets.keyring.get_password", return_value="pw")
    def test_reads_scoped_service(self, mock_get):
        provider = KeyringSecretProvider("mail")
        assert provider.get_secret("password") == "pw"
        mock_get.assert_called_once_with("mailtask:mail", "password")

    @patch("mailtask.secrets.keyring.get_password", side_effect=KeyringError("locked"))
    def test_backend_failure_is_configuration_error(self, mock_get):
        with pytest.raises(ConfigurationError, match="Secret store unavailable"):
            KeyringSecretProvider("mail").get_secret("password")

    def test_mapping_provider_repr_hides_values(self):
        assert "pw" not in repr(MappingSecretProvider({"password": "pw"}))
