"""
Sanato Core: Constants and Type Definitions

This module provides system-wide constants, error codes, configuration keys
and the named defaults applied during first-run setup.
"""
from enum import Enum, IntEnum


# Version information
SANATO_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for Sanato operations."""

    INVALID_INPUT = 1  # Bad path, malformed configuration or input
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Resource conflict (exists, duplicate route)
    DEPENDENCY_ERROR = 5  # A collaborator failed to initialize
    INTERNAL_ERROR = 6  # Bug in Sanato
    IO_ERROR = 7  # Reading or writing failed
    UNAUTHORIZED = 8  # Missing or invalid credentials


# Process exit codes
class ExitCode(IntEnum):
    """Exit statuses returned by the ``sanato`` command."""

    OK = 0
    STARTUP_FAILED = 1
    LISTENER_FAILED = 2
    INTERRUPTED = 130


# Resource limits and defaults
class Limits:
    """System resource limits and default values."""

    # Network
    MIN_PORT = 1
    MAX_PORT = 65535

    # Path limits
    MAX_PATH_LENGTH = 4096

    # Credentials
    MAX_USERNAME_LENGTH = 64

    # HTTP
    MAX_JSON_BODY = 64 * 1024  # 64KB
    STREAM_CHUNK_SIZE = 64 * 1024  # 64KB
    SERVER_THREADS = 10


# Setup defaults
DEFAULT_PORT = 8000
DEFAULT_ROOT_DATA_DIR = "data"
DEFAULT_ROOT_TEMP_DIR = "tmp"
DEFAULT_WEB_URL = "/web/"
DEFAULT_WEB_DIR = "."
DEFAULT_TOKEN_CIPHER_SUITE = "HS256"
TOKEN_SECRET_LENGTH = 20
DEFAULT_TOKEN_TTL_SECONDS = 3600


# Default file locations (CLI)
DEFAULT_CONFIG_FILE = "./config.json"
DEFAULT_AUTH_FILE = "./auth.json"
DEFAULT_HOST = "0.0.0.0"


# Argon2id work factors
HASH_TIME_COST = 3
HASH_MEMORY_COST = 65536  # KiB
HASH_PARALLELISM = 4


# Module mount points
AUTH_URL = "/auth"
WEBDAV_URL = "/webdav"
FILES_URL = "/files"


# Supported token signing algorithms (symmetric only, the secret is shared)
SUPPORTED_CIPHER_SUITES = ("HS256", "HS384", "HS512")


# Configuration keys (on-disk names)
class ConfigKey:
    """Configuration key constants."""

    PORT = "port"
    ROOT_DATA_DIR = "rootDataDir"
    ROOT_TEMP_DIR = "rootTempDir"
    TOKEN_SECRET = "tokenSecret"
    TOKEN_CIPHER_SUITE = "tokenCipherSuite"
    WEB_URL = "webURL"
    WEB_DIR = "webDir"

    REQUIRED = (PORT, ROOT_DATA_DIR, ROOT_TEMP_DIR, TOKEN_SECRET)


# Credential file keys (on-disk names)
class UserKey:
    """Credential file key constants."""

    USERS = "users"
    USERNAME = "username"
    PASSWORD = "password"
    DISPLAY_NAME = "displayName"
    EMAIL = "email"


class FileKind(Enum):
    """Kinds of entries exposed by the storage capability."""

    FILE = "file"
    DIRECTORY = "directory"
