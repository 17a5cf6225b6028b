"""Sanato Core - Shared utilities and infrastructure.

Import specific functions from submodules:
    from sanato.core.config import Config, ConfigProvider
    from sanato.core.errors import SanatoError
    from sanato.core.logging import Logger
    from sanato.core import constants
    from sanato.core import file_ops
    from sanato.core import validators
"""

# Re-export main module references for convenience
from sanato.core import (
    config,
    constants,
    errors,
    file_ops,
    logging,
    validators,
)

__all__ = [
    "config",
    "constants",
    "errors",
    "file_ops",
    "logging",
    "validators",
]
