# =============================================================================
# CLI Tests
# =============================================================================

import json
from unittest.mock import patch

import pytest

from mailtask.app import main
from mailtask.config import SystemConfig


@pytest.fixture
def task_file(temp_dir):
    path = temp_dir / "task.toml"
    path.write_text(
        'to = ["a@x.com"]\n'
        'from = "r@x.com"\n'
        'subject = "Hi"\n'
        'body = "Hello"\n'
        'host = "smtp.user.example"\n'
        'port = 25\n'
    )
    return path


@patch("mailtask.secrets.keyring.get_password", return_value=None)
def test_sends_task(mock_keyring, mock_smtp, task_file, temp_dir, capsys):
    exit_code = main([str(task_file), "--config", str(temp_dir / "none.toml")])

    assert exit_code == 0
    assert "smtp.user.example:25 (user)" in capsys.readouterr().out
    mock_smtp.return_value.send_message.assert_awaited_once()


@patch("mailtask.secrets.keyring.get_password", return_value=None)
def test_task_failure_prints_error_config(mock_keyring, mock_smtp, temp_dir, capsys):
    task = temp_dir / "task.toml"
    task.write_text('to = "a@x.com"\nfrom = "r@x.com"\nsubject = "s"\nbody = "b"\n')

    exit_code = main([str(task), "--config", str(temp_dir / "none.toml")])

    assert exit_code == 1
    err = capsys.readouterr().err
    error = json.loads(err[err.index("{\n"):])
    assert error["kind"] == "configuration"


def test_invalid_task_file(temp_dir, capsys):
    task = temp_dir / "task.toml"
    task.write_text("to = ")

    assert main([str(task), "--config", str(temp_dir / "none.toml")]) == 1
    assert "Invalid task parameters" in capsys.readouterr().err


def test_init_config(temp_dir):
    path = temp_dir / "mailtask" / "config.toml"

    assert main(["--init-config", "--config", str(path)]) == 0
    assert SystemConfig.load(path) == SystemConfig()
    assert main(["--init-config", "--config", str(path)]) == 1


def test_params_required():
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 2
