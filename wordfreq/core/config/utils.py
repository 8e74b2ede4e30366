"""
Utility functions for configuration management.
"""

import os
from functools import lru_cache

# Directory holding the `wordfreq` package.
PACKAGE_PARENT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))


@lru_cache(maxsize=1)
def get_project_root() -> str:
    """
    Returns the checkout root when running from source, else the working directory.

    An installed package lives in site-packages, which is no place for logs.
    """
    if os.path.isfile(os.path.join(PACKAGE_PARENT, "pyproject.toml")):
        return PACKAGE_PARENT
    return os.getcwd()
