"""
Sanato Core: Error taxonomy.

Every failure that can stop the bootstrap derives from SanatoError and
carries an ErrorCode. Startup treats all of them as fatal.
"""
from typing import Optional

from sanato.core.constants import ErrorCode


class SanatoError(Exception):
    """Base exception for Sanato errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        """Initialize SanatoError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


# I/O


class BootstrapIOError(SanatoError):
    """Reading or writing a config, credential or interactive stream failed."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.IO_ERROR):
        super().__init__(message, error_code)


class PromptError(BootstrapIOError):
    """Interactive input could not be read (EOF or stream failure)."""


class StoreIOError(BootstrapIOError):
    """A config or credential file could not be read or written."""


# Parsing


class ParseError(SanatoError):
    """Malformed content."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class ConfigParseError(ParseError):
    """Configuration file content is malformed or incomplete."""


class PortParseError(ParseError):
    """Port input is not an unsigned integer in the valid range."""


# Configuration lifecycle


class ConfigNotFoundError(SanatoError):
    """No configuration file exists yet."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.NOT_FOUND)


class ConfigExistsError(SanatoError):
    """Refusing to create a configuration over an existing one."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFLICT)


# Storage


class ProviderInitError(SanatoError):
    """The storage roots are unusable."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.DEPENDENCY_ERROR):
        super().__init__(message, error_code)


class StorageError(SanatoError):
    """A storage capability operation failed."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.IO_ERROR):
        super().__init__(message, error_code)


# Modules


class ModuleInitError(SanatoError):
    """A module failed to construct."""

    def __init__(self, message: str, module: Optional[str] = None):
        super().__init__(message, ErrorCode.DEPENDENCY_ERROR)
        self.module = module


class ModuleStartError(SanatoError):
    """A constructed module failed to start."""

    def __init__(self, message: str, module: Optional[str] = None):
        super().__init__(message, ErrorCode.DEPENDENCY_ERROR)
        self.module = module


class RouteConflictError(SanatoError):
    """Two registrations claimed the same route or mount point."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFLICT)


# Credentials


class HashError(SanatoError):
    """Password hashing failed; nothing was persisted."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INTERNAL_ERROR)


class CredentialError(SanatoError):
    """Invalid credential data or operation."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class TokenError(SanatoError):
    """A session token is missing, malformed, expired or forged."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.UNAUTHORIZED)


# Runtime


class ListenerError(SanatoError):
    """The HTTP listener could not bind or crashed while serving."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.IO_ERROR)
