# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Main entry point for the syslog receiver

# Standard library imports
import argparse
import asyncio
import logging
import sys

from typing import Optional

# Local/package imports
from courier_syslog_receiver.config import (
    Config,
    ListenerConfig,
    configure_logging,
    load_config,
)
from courier_syslog_receiver.handlers import KafkaHandler, LoggingHandler
from courier_syslog_receiver.telemetry import setup_tracing


def setup_logging(log_level: str = "INFO", config: Optional[Config] = None) -> None:
    """
    Configure logging with appropriate formatters and handlers.

    Args:
        log_level: The logging level to set (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        config: Optional configuration object to use for logging setup
    """
    if config:
        configure_logging(config)
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Set specific log levels for third-party libraries
    logging.getLogger("aiokafka").setLevel(logging.WARNING)


def build_server(config: Config):
    """
    Create a server with the handler chain described by the configuration.

    Args:
        config: The configuration object

    Returns:
        A SyslogServer that has not started listening yet
    """
    # Local/package imports
    from courier_syslog_receiver.server import SyslogServer

    server = SyslogServer(config)
    server.add_handler(
        LoggingHandler(enable_model_json_output=config.enable_model_json_output)
    )

    if config.kafka_bootstrap_servers:
        # Local/package imports
        from courier_syslog_receiver.kafka_output_backend import KafkaOutputBackend

        backend = KafkaOutputBackend(config.kafka_bootstrap_servers, config.kafka_topic)
        server.add_handler(KafkaHandler(backend))

    return server


def run_server(config: Optional[Config] = None) -> None:
    """
    Run the syslog receiver until interrupted.

    Args:
        config: Optional configuration object, defaults are used when omitted
    """
    logger = logging.getLogger("courier_syslog_receiver.main")

    try:
        if not config:
            config = Config()

        setup_tracing(console_export=config.enable_console_tracing)

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        server = build_server(config)

        try:
            loop.run_until_complete(server.start(loop))
            loop.run_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt, shutting down...")
        finally:
            loop.run_until_complete(server.shutdown())

            # Let handlers finish work scheduled by the termination signal
            pending = asyncio.all_tasks(loop)
            if pending:
                loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            loop.close()

    except Exception as e:
        logger.exception(f"Failed to run server: {e}")
        sys.exit(1)


def main() -> None:
    """
    Main entry point for the syslog receiver.
    Parses command-line arguments, sets up logging, and starts the server.
    """
    parser = argparse.ArgumentParser(description="Courier Syslog Receiver")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides config file)",
    )
    parser.add_argument(
        "--listen",
        type=str,
        help="Address to listen on, host:port or a socket path for unix "
        "(replaces the configured listeners)",
    )
    parser.add_argument(
        "--protocol",
        type=str,
        choices=["udp", "tcp", "unix"],
        default=None,
        help="Protocol for --listen (default: udp)",
    )
    parser.add_argument(
        "--allowed-tag-runes",
        type=str,
        help="Extra characters allowed in program tags (overrides config file)",
    )
    parser.add_argument(
        "--fatal-action",
        type=str,
        choices=["exit", "log"],
        help="What to do on a fatal listener error (overrides config file)",
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config if args.config else None)

        # Override config with command line arguments if provided
        if args.log_level:
            config.log_level = args.log_level
        if args.listen:
            config.listeners = [
                ListenerConfig(address=args.listen, protocol=args.protocol or "udp")
            ]
        elif args.protocol:
            parser.error("--protocol requires --listen")
        if args.allowed_tag_runes is not None:
            config.allowed_tag_runes = args.allowed_tag_runes
        if args.fatal_action:
            config.fatal_action = args.fatal_action

        setup_logging(config=config)
        logger = logging.getLogger("courier_syslog_receiver.main")

        if args.config:
            logger.info(f"Loaded configuration from {args.config}")
        else:
            logger.info("Using default or automatically detected configuration")

        logger.info("Starting Courier Syslog Receiver")
        run_server(config)
    except KeyboardInterrupt:
        logger = logging.getLogger("courier_syslog_receiver.main")
        logger.info("Server shutdown requested by user")
    except Exception as e:
        # Setup basic logging if we couldn't load the configuration
        if not logging.root.handlers:
            setup_logging("ERROR")
        logger = logging.getLogger("courier_syslog_receiver.main")
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
