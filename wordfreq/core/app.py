"""
Centralized application initialization.

This module provides a single point of entry for initializing the application's
core services, such as configuration and logging. Entrypoints (e.g. main.py,
the CLI) should call `initialize_app` to get a fully configured environment.
"""

from typing import Optional

import structlog

from wordfreq.core.config import AppSettings, get_settings
from wordfreq.core.logger import setup_logging

_logger = structlog.get_logger(__name__)


class AppContext:
    """
    Centralized application context.
    """

    def __init__(self, settings: AppSettings):
        self.settings = settings
        setup_logging(self.settings)
        _logger.debug("Application context initialized.")

    @classmethod
    def create(cls, settings: Optional[AppSettings] = None) -> "AppContext":
        """
        Creates a new instance of the application context.
        """
        return cls(settings or get_settings())


def initialize_app(settings: Optional[AppSettings] = None) -> AppContext:
    """
    Initializes the application by creating the application context.
    """
    return AppContext.create(settings)
