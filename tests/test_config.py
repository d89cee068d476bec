# =============================================================================
# System Configuration Tests
# =============================================================================

import dataclasses

import pytest

from mailtask.config import ConfigError, SystemConfig, default_config_path
from mailtask.core import MailDefaults, SmtpConfig, SmtpOrigin
from mailtask.errors import InvalidParameterError
from mailtask.values import as_bool, as_int


class TestLoad:

    def test_missing_file_gives_empty_config(self, temp_dir):
        config = SystemConfig.load(temp_dir / "absent.toml")
        assert config == SystemConfig()
        assert config.smtp is None

    def test_nested_table(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text(
            '[config.mail]\n'
            'from = "workflow@example.com"\n'
            'subject = "Report"\n'
            'host = "smtp.internal"\n'
            'port = 465\n'
            'ssl = true\n'
            'username = "operator"\n'
            'password = "secret"\n'
        )

        config = SystemConfig.load(path)

        assert config.mail_defaults == MailDefaults(subject="Report", from_address="workflow@example.com")
        assert config.smtp == SmtpConfig(
            host="smtp.internal", port=465, start_tls=True, ssl=True, debug=False,
            username="operator", password="secret", origin=SmtpOrigin.SYSTEM,
        )

    def test_flat_dotted_keys(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('"config.mail.host" = "smtp.internal"\n"config.mail.port" = "25"\n"config.mail.tls" = "false"\n')

        smtp = SystemConfig.load(path).smtp

        assert smtp.host == "smtp.internal"
        assert smtp.port == 25
        assert smtp.start_tls is False

    def test_defaults_without_host(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[config.mail]\nsubject = "Report"\nusername = "operator"\n')

        config = SystemConfig.load(path)

        assert config.smtp is None
        assert config.mail_defaults.subject == "Report"

    def test_host_without_port_rejected(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[config.mail]\nhost = "smtp.internal"\n')
        with pytest.raises(ConfigError, match="port"):
            SystemConfig.load(path)

    def test_malformed_toml_rejected(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[config.mail\nhost = ")
        with pytest.raises(ConfigError):
            SystemConfig.load(path)

    def test_wrong_type_rejected(self):
        with pytest.raises(ConfigError):
            SystemConfig.from_dict({"config": {"mail": {"host": "h", "port": 25, "ssl": "maybe"}}})

    def test_default_path_respects_xdg(self, temp_dir, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
        assert default_config_path() == temp_dir / "mailtask" / "config.toml"


class TestImmutability:

    def test_system_config_is_frozen(self, system_config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            system_config.smtp = None

    def test_smtp_config_hides_password(self, system_smtp):
        assert "operator-secret" not in repr(system_smtp)


class TestSave:

    def test_save_and_load(self, temp_dir, system_config):
        path = system_config.save(temp_dir / "sub" / "config.toml")
        assert SystemConfig.load(path) == system_config

    def test_empty_config_writes_empty_table(self, temp_dir):
        path = SystemConfig().save(temp_dir / "config.toml")
        assert SystemConfig.load(path) == SystemConfig()


class TestValues:

    @pytest.mark.parametrize("value, expected", [(587, 587), ("587", 587), (" 25 ", 25)])
    def test_as_int(self, value, expected):
        assert as_int("port", value) == expected

    @pytest.mark.parametrize("value", [True, "abc", 2.5, None])
    def test_as_int_rejects(self, value):
        with pytest.raises(InvalidParameterError):
            as_int("port", value)

    @pytest.mark.parametrize("value, expected", [(True, True), ("false", False), ("YES", True), ("0", False)])
    def test_as_bool(self, value, expected):
        assert as_bool("tls", value) is expected

    @pytest.mark.parametrize("value", ["maybe", 1, None])
    def test_as_bool_rejects(self, value):
        with pytest.raises(InvalidParameterError):
            as_bool("tls", value)
