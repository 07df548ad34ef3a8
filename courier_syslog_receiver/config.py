# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Configuration module for loading and parsing configuration files

# Standard library imports
import logging

from pathlib import Path
from typing import List, Optional, Union

# Third-party imports
import yaml

from pydantic import BaseModel, Field, field_validator

VALID_PROTOCOLS = ["udp", "tcp", "unix"]


class LoggerConfig(BaseModel):
    """
    Configuration for individual loggers.

    Attributes:
        name (str): Logger name.
        level (str): Logging level (default: "INFO").
        propagate (bool): Whether to propagate logs to parent (default: True).
    """

    name: str
    level: str = "INFO"
    propagate: bool = True


class ListenerConfig(BaseModel):
    """
    Configuration for a single listening endpoint.

    Attributes:
        address (str): "host:port" for udp/tcp ("[::1]:514" for IPv6),
            a filesystem path for unix.
        protocol (str): "udp", "tcp" or "unix" (default: "udp").
    """

    address: str
    protocol: str = "udp"

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate that the protocol is UDP, TCP or Unix."""
        v = v.lower()
        if v not in VALID_PROTOCOLS:
            raise ValueError(f"Invalid protocol: {v}. Must be one of {VALID_PROTOCOLS}")
        return v


def _default_listeners() -> List[ListenerConfig]:
    return [ListenerConfig(address="[::]:514", protocol="udp")]


class Config(BaseModel):
    """
    Main configuration class for the Courier Syslog Receiver.

    This class defines all configuration options for the receiver, including
    listeners, decoding, fatal error handling, outputs and logging.
    """

    # Listener configuration
    listeners: List[ListenerConfig] = Field(default_factory=_default_listeners)
    read_buffer_size: int = 1024  # Bytes read per datagram or stream read

    # Decoder configuration
    allowed_tag_runes: str = ""  # Extra characters allowed in program tags

    # Fatal listener errors: "exit" halts the process, "log" keeps it running
    fatal_action: str = "exit"

    # Outputs
    enable_model_json_output: bool = (
        False  # Whether to log JSON output of decoded messages (for demos/debugging)
    )
    enable_console_tracing: bool = False  # Export OpenTelemetry spans to the console
    kafka_bootstrap_servers: Optional[str] = None  # Enables the Kafka handler
    kafka_topic: str = "syslog"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    loggers: List[LoggerConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a valid Python logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("fatal_action")
    @classmethod
    def validate_fatal_action(cls, v: str) -> str:
        """Validate that the fatal action is valid."""
        valid_actions = ["exit", "log"]
        v = v.lower()
        if v not in valid_actions:
            raise ValueError(
                f"Invalid fatal action: {v}. Must be one of {valid_actions}"
            )
        return v

    @field_validator("read_buffer_size")
    @classmethod
    def validate_read_buffer_size(cls, v: int) -> int:
        """Validate that the read buffer size is positive."""
        if v <= 0:
            raise ValueError(f"Invalid read buffer size: {v}. Must be positive")
        return v


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, will look for config.yaml
                   in the current directory and default directories.

    Returns:
        A Config object containing the loaded configuration.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        yaml.YAMLError: If the configuration file contains invalid YAML.
    """
    # Default search paths
    search_paths = [
        Path.cwd() / "config.yaml",
        Path.cwd() / "config.yml",
        Path("/etc/courier-syslog-receiver/config.yaml"),
        Path("/etc/courier-syslog-receiver/config.yml"),
    ]

    # If config path is provided, try that first
    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        for path in search_paths:
            if path.exists():
                config_file = path
                break
        else:
            # No config file found, return default configuration
            logging.warning("No configuration file found, using default configuration")
            return Config()

    with open(config_file, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
            return Config(**config_data)
        except yaml.YAMLError as e:
            logging.error("Error parsing configuration file", extra={"error": e})
            raise
        except Exception as e:
            logging.error("Error loading configuration", extra={"error": e})
            raise


class SafeExtraFormatter(logging.Formatter):
    """
    Custom formatter that substitutes missing extra fields with a blank string,
    so log formats may reference them.
    """

    optional_fields = ("decoded_model_json", "log_msg", "hostname", "tag")

    def format(self, record: logging.LogRecord) -> str:
        for field in self.optional_fields:
            if not hasattr(record, field):
                setattr(record, field, "")
        return super().format(record)


def configure_logging(config: "Config") -> None:
    """
    Configure logging based on the provided configuration.

    Args:
        config: The loaded configuration object.
    """
    # Reset logging configuration
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    level = getattr(logging, config.log_level, logging.INFO)
    formatter = SafeExtraFormatter(config.log_format, datefmt=config.log_date_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logging.root.setLevel(level)
    logging.root.addHandler(console_handler)

    # Configure additional loggers from config
    for logger_config in config.loggers:
        logger = logging.getLogger(logger_config.name)
        logger.setLevel(getattr(logging, logger_config.level, logging.INFO))
        logger.propagate = logger_config.propagate
