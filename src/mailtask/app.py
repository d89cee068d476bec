# =============================================================================
# mailtask Command Line
# =============================================================================
# Runs a single mail task outside of the workflow engine, e.g. to check an
# SMTP setup:
#
#   mailtask task.toml                   # send using task.toml's parameters
#   mailtask task.toml --config sys.toml # with a specific system config
#   mailtask --init-config               # write an empty system config
#   mailtask --paths                     # show where config is read from
#
# task.toml holds the task parameters (to, subject, body, attach_files, ...).
# Secrets are read from the system keyring under the "mailtask:mail"
# service. Attachments and body templates are resolved relative to the
# workspace, which defaults to the directory containing task.toml.
# =============================================================================

import argparse
import json
import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

from mailtask import __app_name__, __version__
from mailtask.config import ConfigError, SystemConfig, default_config_path, print_paths
from mailtask.errors import TaskExecutionError
from mailtask.secrets import KeyringSecretProvider
from mailtask.smtp import MailSender
from mailtask.workspace import LocalWorkspace

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Send one email the way the workflow mail task does",
    )

    parser.add_argument(
        "params",
        type=Path,
        nargs="?",
        help="TOML file with the task parameters",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write an empty system config file and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to system config file (default: XDG config location)",
    )

    parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace directory (default: directory of the params file)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    args = parser.parse_args(argv)
    if args.params is None and not (args.paths or args.init_config):
        parser.error("the task parameters file is required")
    return args


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [mailtask] %(levelname)s %(name)s: %(message)s",
    )


def load_task_params(path: Path) -> dict[str, Any]:
    """
    Read task parameters from a TOML file.

    Raises:
        ConfigError: If the file can't be read or parsed.
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read task parameters {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid task parameters {path}: {e}") from e


def init_config(path: Path | None) -> int:
    config_path = path or default_config_path()
    if config_path.exists():
        print(f"Config file already exists: {config_path}", file=sys.stderr)
        return 1
    written = SystemConfig().save(config_path)
    print(f"Wrote {written}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailtask.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --init-config, --version)
        3. Loads system configuration and task parameters
        4. Runs the mail task

    Returns:
        Exit code (0 for success, 1 if the task failed).
    """
    args = parse_args(argv)

    if args.paths:
        print_paths()
        return 0

    if args.init_config:
        return init_config(args.config)

    setup_logging(args.debug)

    try:
        system_config = SystemConfig.load(args.config)
        params = load_task_params(args.params)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    workspace = LocalWorkspace(args.workspace or args.params.parent)
    sender = MailSender(system_config)

    try:
        result = sender.run(params, KeyringSecretProvider("mail"), workspace)
    except TaskExecutionError as e:
        print(json.dumps(e.error_config(), indent=2), file=sys.stderr)
        return 1

    print(f"Sent {result.message_id} to {', '.join(result.recipients)} via {result.smtp}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
