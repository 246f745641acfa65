#!/usr/bin/env python3
"""
Main entry point for the tool provisioner.
"""

import asyncio
import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import ValidationError

# Load environment variables from .env file
load_dotenv()

from provisioner.catalog import apply_nodejs_method, build_entries, select_tools
from provisioner.core.preflight import Preflight
from provisioner.core.sequencer import ProvisioningSequencer
from provisioner.errors import ConfigError
from provisioner.executors.runner import CommandRunner
from provisioner.models.outcome import RunReport
from provisioner.utils.logging import setup_root_logger, timestamped_log_path
from config.settings import Settings, LoggingConfig, PreflightConfig


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Install and update development tools idempotently"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--channel",
        choices=["latest", "lts", "sts"],
        help="Version channel for every tool that offers it (default: each tool's configured channel)"
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Reinstall tools even when the installed version is current"
    )

    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep processing tools after a required tool fails"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only probe and plan; change nothing"
    )

    parser.add_argument(
        "--nodejs-method",
        choices=["nodesource", "nvm"],
        help="Install Node.js from the NodeSource apt repository or through nvm"
    )

    parser.add_argument(
        "--skip-preflight",
        action="store_true",
        help="Skip the OS, sudo and prerequisite package checks"
    )

    parser.add_argument(
        "--only",
        type=lambda value: [name for name in value.split(",") if name],
        help="Comma-separated subset of tools to process"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write the run log to this file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run report as JSON on stdout"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, with command line overrides."""
    config_data = {}
    if args.config:
        if not args.config.exists():
            raise ConfigError(f"Config file not found: {args.config}")
        try:
            with open(args.config) as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file {args.config} is not valid JSON: {e}") from e
        if not isinstance(config_data, dict):
            raise ConfigError(f"Config file {args.config} must contain a JSON object")

    # Override with command line args
    if args.channel:
        config_data["channel"] = args.channel
    if args.force:
        config_data["force_reinstall"] = True
    if args.continue_on_error:
        config_data["continue_on_error"] = True
    if args.dry_run:
        config_data["dry_run"] = True
    if args.nodejs_method:
        config_data["nodejs_method"] = args.nodejs_method
    if args.skip_preflight:
        config_data.setdefault("preflight", {})["enabled"] = False
    if args.log_file:
        logging_data = config_data.setdefault("logging", {})
        logging_data["file_path"] = str(args.log_file)
        logging_data["timestamped"] = False
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level

    return Settings(**config_data)


def log_file_for(config: LoggingConfig) -> Optional[Path]:
    if not config.file_path:
        return None
    if config.timestamped:
        return timestamped_log_path(config.file_path)
    return config.file_path


def build_preflight(config: PreflightConfig, runner: CommandRunner) -> Optional[Preflight]:
    if not config.enabled:
        return None
    return Preflight(
        runner=runner,
        supported_os=config.supported_os,
        min_os_version=config.min_os_version,
        allow_root=config.allow_root,
        prerequisites=config.prerequisites
    )


async def provision(sequencer: ProvisioningSequencer) -> RunReport:
    """Run the sequencer, stopping between tools on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, sequencer.request_stop)
        except (NotImplementedError, RuntimeError, ValueError):
            # Not available on this platform or outside the main thread
            break
    return await sequencer.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_arguments(argv)

    try:
        settings = load_config(args)
    except (ConfigError, ValidationError) as e:
        setup_root_logger(level=args.log_level or "INFO")
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    log_file = log_file_for(settings.logging)
    setup_root_logger(
        log_file,
        settings.logging.level,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )

    logger.info("Starting tool provisioning")
    logger.info(f"Arguments: {vars(args)}")
    if log_file:
        logger.info(f"Log file: {log_file}")

    try:
        tools = apply_nodejs_method(select_tools(settings.tools, args.only), settings.nodejs_method)
        runner = CommandRunner(default_timeout=settings.network.command_timeout)
        entries = build_entries(
            tools,
            metadata_timeout=settings.network.metadata_timeout,
            download_timeout=settings.network.download_timeout,
            retry_attempts=settings.network.retry_attempts,
            retry_delay_seconds=settings.network.retry_delay_seconds,
            runner=runner
        )
        sequencer = ProvisioningSequencer(
            entries,
            force_reinstall=settings.force_reinstall,
            continue_on_error=settings.continue_on_error,
            dry_run=settings.dry_run,
            channel_override=settings.channel,
            preflight=build_preflight(settings.preflight, runner)
        )
        report = asyncio.run(provision(sequencer))

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return EXIT_FAILED

    if args.json:
        print(json.dumps(report.summary(), indent=2))

    return EXIT_OK if report.succeeded else EXIT_FAILED


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
