# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Pytest configuration file

# Standard library imports
import logging

from datetime import datetime, timezone

# Third-party imports
import pytest


# Define test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark a test as an integration test"
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test."""
    yield
    # Reset root logger after each test
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)  # Default level


class RecordingHandler:
    """Handler that records its input and returns a configurable result."""

    def __init__(self, name, calls, passthrough=True):
        self.name = name
        self.calls = calls
        self.passthrough = passthrough

    def handle(self, message):
        self.calls.append((self.name, message))
        return message if self.passthrough else None


class RecordingFatalSink:
    """Non-halting fatal sink that keeps the reported values."""

    def __init__(self):
        self.reports = []

    def fatal(self, *values):
        self.reports.append(values)


@pytest.fixture
def arrival_time():
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fatal_sink():
    return RecordingFatalSink()


@pytest.fixture
def recording_handler_factory():
    def factory(name, calls, passthrough=True):
        return RecordingHandler(name, calls, passthrough)

    return factory
