"""
Configuration models for the application.
"""

import os
from dataclasses import dataclass, field


@dataclass
class AggregationSettings:
    """Settings for the concurrent aggregation run."""

    max_workers: int = 8  # Upper bound on concurrently running sources
    deadline_seconds: float = 0.0  # 0 disables the overall deadline


@dataclass
class HTTPSettings:
    """Settings for fetching remote documents."""

    timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_delay_seconds: float = 1.0
    requests_per_minute: int = 120
    user_agent: str = "wordfreq/0.1"


@dataclass
class FileSettings:
    """Settings for reading local documents."""

    encoding: str = "utf-8"


@dataclass
class PathSettings:
    """
    Path settings.
    All paths are absolute and constructed from the project root.
    """

    root_dir: str = field(init=False)
    log_dir: str = field(init=False)
    log_file: str = field(init=False)

    def __post_init__(self):
        from .utils import get_project_root

        self.root_dir = get_project_root()
        # Allow overriding log_dir with environment variable
        self.log_dir = os.getenv("LOG_DIR", os.path.join(self.root_dir, "logs"))
        self.log_file = os.path.join(self.log_dir, "wordfreq.log")


@dataclass
class AppSettings:
    """Root application settings."""

    aggregation: AggregationSettings
    http: HTTPSettings
    files: FileSettings
    paths: PathSettings
    console_log_level: str = "INFO"
