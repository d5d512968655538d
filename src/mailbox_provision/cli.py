"""Command line entry point."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from mailbox_provision.config import load_config
from mailbox_provision.environments.environment import inspect_environment, load_record
from mailbox_provision.errors import MailboxProvisionError, log_error
from mailbox_provision.guard import exclusive_run
from mailbox_provision.logging import configure_logging, get_logger
from mailbox_provision.pipeline import provision_environment, run_setup
from mailbox_provision.platforms import get_platform_tag

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailbox-provision",
        description="Provision the mail appliance management daemon",
    )
    parser.add_argument("--config", type=Path, help="TOML configuration file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--platform",
        help="Platform tag to provision for (default: detected from /etc/os-release)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup", help="Run the full management daemon setup")
    subparsers.add_parser("ensure-env", help="Only ensure the Python environment")
    subparsers.add_parser("status", help="Show the environment state without changing it")
    return parser


def show_status(env_dir: Path, platform_tag: str) -> dict:
    record = load_record(env_dir)
    return {
        "path": str(env_dir),
        "state": inspect_environment(env_dir, platform_tag).value,
        "current_platform": platform_tag,
        "stored_platform": record.platform_tag if record else None,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the mailbox-provision command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        platform_tag = args.platform or get_platform_tag()

        if args.command == "status":
            print(json.dumps(show_status(config.env_dir, platform_tag)))
        elif args.command == "ensure-env":
            with exclusive_run(config.lock_path):
                provision_environment(config, platform_tag)
        else:
            asyncio.run(run_setup(config, platform_tag))
    except (MailboxProvisionError, OSError) as e:
        log_error(e, context={"command": args.command}, logger=logger)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
