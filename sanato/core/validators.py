"""
Sanato Core: Input Validators.

Pure defaulting, validation and path-cleaning rules used by the setup
wizard and by configuration parsing. Nothing here touches a terminal or
the filesystem, so every rule is testable on plain strings.
"""
import posixpath
import re
import secrets
import string
from typing import Any

from sanato.core.constants import (
    DEFAULT_PORT,
    DEFAULT_WEB_URL,
    SUPPORTED_CIPHER_SUITES,
    TOKEN_SECRET_LENGTH,
    Limits,
)
from sanato.core.errors import CredentialError, ParseError, PortParseError

SECRET_ALPHABET = string.ascii_letters + string.digits

_UNSIGNED_INT = re.compile(r"^[0-9]+$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+$")


def validate_port(value: Any) -> int:
    """Validate a port number already decoded from a config file.

    Args:
        value: Candidate port

    Returns:
        The port as int

    Raises:
        PortParseError: If the value is not an integer within 1..65535
    """
    # bool is an int subclass; "port: true" is not a port
    if isinstance(value, bool) or not isinstance(value, int):
        raise PortParseError(f"Port must be an integer, got {type(value).__name__}")
    if not Limits.MIN_PORT <= value <= Limits.MAX_PORT:
        raise PortParseError(
            f"Port must be between {Limits.MIN_PORT} and {Limits.MAX_PORT}, got {value}"
        )
    return value


def resolve_port(text: str) -> int:
    """Resolve the port answer given to the setup wizard.

    Empty input selects DEFAULT_PORT. Anything else must be an unsigned
    decimal integer in the valid port range.

    Args:
        text: Raw input line without its newline

    Returns:
        Port number

    Raises:
        PortParseError: If the input is not a valid port
    """
    text = text.strip()
    if not text:
        return DEFAULT_PORT
    if not _UNSIGNED_INT.match(text):
        raise PortParseError(f"Invalid port: {text!r} is not an unsigned integer")
    return validate_port(int(text))


def clean_path(path: str) -> str:
    """Lexically clean a path.

    Collapses repeated separators, resolves ``.`` and ``..`` elements and
    drops trailing slashes. The empty path cleans to ``"."``.

    Examples:
        >>> clean_path("./foo/../bar")
        'bar'
        >>> clean_path("/site/")
        '/site'
    """
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    # POSIX keeps a leading "//"; collapse it like any other separator run
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def resolve_dir(text: str, default: str) -> str:
    """Resolve a directory answer: empty selects the default, then clean.

    Args:
        text: Raw input line without its newline
        default: Named default for this prompt

    Returns:
        Cleaned directory path, never empty
    """
    text = text.strip()
    return clean_path(text or default)


def resolve_web_url(text: str) -> str:
    """Resolve the static-site URL prefix.

    Empty input, or input that cleans to ``""``, ``"."`` or ``"/"``,
    selects DEFAULT_WEB_URL so the static site never shadows the root.

    Args:
        text: Raw input line without its newline

    Returns:
        Cleaned URL prefix
    """
    text = text.strip()
    cleaned = clean_path(text) if text else ""
    if cleaned in ("", ".", "/"):
        return clean_path(DEFAULT_WEB_URL)
    if not cleaned.startswith("/"):
        # "../x" only cleans away its dot segments once it is rooted
        cleaned = clean_path("/" + cleaned)
        if cleaned == "/":
            return clean_path(DEFAULT_WEB_URL)
    return cleaned


def validate_cipher_suite(name: str) -> str:
    """Validate the token signing algorithm name.

    Raises:
        ParseError: If the algorithm is not a supported symmetric one
    """
    if name not in SUPPORTED_CIPHER_SUITES:
        raise ParseError(
            f"Unsupported token cipher suite {name!r}; "
            f"expected one of {', '.join(SUPPORTED_CIPHER_SUITES)}"
        )
    return name


def generate_secret(length: int = TOKEN_SECRET_LENGTH) -> str:
    """Generate a cryptographically random alphanumeric secret.

    Args:
        length: Number of characters

    Returns:
        Random string drawn from ASCII letters and digits
    """
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


def validate_username(username: str) -> str:
    """Validate an account name.

    Raises:
        CredentialError: If the name is empty, too long, or contains
            whitespace or a path separator
    """
    if not username:
        raise CredentialError("Username must not be empty")
    if len(username) > Limits.MAX_USERNAME_LENGTH:
        raise CredentialError(
            f"Username longer than {Limits.MAX_USERNAME_LENGTH} characters"
        )
    if any(ch.isspace() for ch in username) or "/" in username:
        raise CredentialError(f"Username {username!r} contains whitespace or '/'")
    return username


def validate_password(password: str) -> str:
    """Validate a plaintext password before it is hashed.

    Raises:
        CredentialError: If the password is empty
    """
    if not password:
        raise CredentialError("Password must not be empty")
    return password


def validate_email(email: str) -> str:
    """Validate an email address; the empty string is allowed.

    Raises:
        CredentialError: If a non-empty address is not of the form local@domain
    """
    if email and not _EMAIL.match(email):
        raise CredentialError(f"Invalid email address: {email!r}")
    return email
