"""
Centralized configuration management.

This module provides a clean interface to the configuration system.
"""

from .loader import get_settings as get_settings
from .models import (
    AggregationSettings as AggregationSettings,
)
from .models import (
    AppSettings as AppSettings,
)
from .models import (
    FileSettings as FileSettings,
)
from .models import (
    HTTPSettings as HTTPSettings,
)
from .models import (
    PathSettings as PathSettings,
)

__all__ = [
    "AggregationSettings",
    "AppSettings",
    "FileSettings",
    "HTTPSettings",
    "PathSettings",
    "get_settings",
]
