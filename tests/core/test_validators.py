"""Tests for setup input validation and path cleaning."""
import pytest

from sanato.core.constants import DEFAULT_PORT, TOKEN_SECRET_LENGTH
from sanato.core.errors import CredentialError, ParseError, PortParseError
from sanato.core.validators import (
    SECRET_ALPHABET,
    clean_path,
    generate_secret,
    resolve_dir,
    resolve_port,
    resolve_web_url,
    validate_cipher_suite,
    validate_email,
    validate_password,
    validate_port,
    validate_username,
)


class TestResolvePort:
    """Test port answers from the setup wizard."""

    def test_empty_selects_default(self):
        assert resolve_port("") == DEFAULT_PORT == 8000

    def test_whitespace_selects_default(self):
        assert resolve_port("   ") == 8000

    def test_explicit_port(self):
        assert resolve_port("8080") == 8080

    def test_surrounding_whitespace_ignored(self):
        assert resolve_port(" 443 ") == 443

    def test_upper_bound_accepted(self):
        assert resolve_port("65535") == 65535

    @pytest.mark.parametrize("text", ["abc", "-1", "+80", "80.5", "8o80", "0x1f"])
    def test_non_numeric_rejected(self, text):
        with pytest.raises(PortParseError) as exc_info:
            resolve_port(text)
        assert "unsigned integer" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["0", "65536", "99999999999"])
    def test_out_of_range_rejected(self, text):
        with pytest.raises(PortParseError):
            resolve_port(text)


class TestValidatePort:
    """Test ports decoded from a config file."""

    def test_int_accepted(self):
        assert validate_port(9000) == 9000

    def test_bool_rejected(self):
        with pytest.raises(PortParseError):
            validate_port(True)

    def test_string_rejected(self):
        with pytest.raises(PortParseError):
            validate_port("8000")


class TestCleanPath:
    """Test lexical path cleaning."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", "."),
            (".", "."),
            ("./foo/../bar", "bar"),
            ("/site/", "/site"),
            ("//a//b/", "/a/b"),
            ("/srv/data", "/srv/data"),
            ("a/./b/../../..", ".."),
        ],
    )
    def test_cleaning(self, raw, expected):
        assert clean_path(raw) == expected


class TestResolveDir:
    """Test directory answers."""

    def test_empty_selects_default(self):
        assert resolve_dir("", "data") == "data"

    def test_answer_is_cleaned(self):
        assert resolve_dir("/srv/tmp/", "tmp") == "/srv/tmp"

    def test_default_is_cleaned(self):
        assert resolve_dir("", "./web/") == "web"


class TestResolveWebURL:
    """Test the static-site prefix answer."""

    @pytest.mark.parametrize("text", ["", "  ", "/", ".", "/a/.."])
    def test_root_like_answers_select_default(self, text):
        assert resolve_web_url(text) == "/web"

    def test_trailing_slash_removed(self):
        assert resolve_web_url("/site/") == "/site"

    def test_leading_slash_added(self):
        assert resolve_web_url("site") == "/site"

    @pytest.mark.parametrize("text, expected", [("../x", "/x"), ("../../x/y", "/x/y"), ("a/../../b", "/b")])
    def test_parent_segments_cannot_escape_root(self, text, expected):
        assert resolve_web_url(text) == expected

    @pytest.mark.parametrize("text", ["..", "../..", "./.."])
    def test_parent_only_selects_default(self, text):
        assert resolve_web_url(text) == "/web"


class TestGenerateSecret:
    """Test token secret generation."""

    def test_default_length_and_alphabet(self):
        secret = generate_secret()
        assert len(secret) == TOKEN_SECRET_LENGTH == 20
        assert all(ch in SECRET_ALPHABET for ch in secret)
        assert secret.isalnum()

    def test_custom_length(self):
        assert len(generate_secret(8)) == 8

    def test_secrets_differ(self):
        assert generate_secret() != generate_secret()


class TestCipherSuite:
    """Test token algorithm validation."""

    @pytest.mark.parametrize("name", ["HS256", "HS384", "HS512"])
    def test_symmetric_accepted(self, name):
        assert validate_cipher_suite(name) == name

    @pytest.mark.parametrize("name", ["RS256", "none", ""])
    def test_others_rejected(self, name):
        with pytest.raises(ParseError):
            validate_cipher_suite(name)


class TestUserFields:
    """Test username, password and email validation."""

    def test_valid_username(self):
        assert validate_username("admin") == "admin"

    @pytest.mark.parametrize("name", ["", "two words", "a/b", "tab\tname", "x" * 65])
    def test_invalid_username(self, name):
        with pytest.raises(CredentialError):
            validate_username(name)

    @pytest.mark.parametrize("email", ["", "a@b.com", "first.last@example.org"])
    def test_valid_email(self, email):
        assert validate_email(email) == email

    @pytest.mark.parametrize("email", ["nope", "a@", "@b", "a b@c.d", "a@b@c"])
    def test_invalid_email(self, email):
        with pytest.raises(CredentialError):
            validate_email(email)

    def test_empty_password(self):
        with pytest.raises(CredentialError) as exc_info:
            validate_password("")
        assert "Password must not be empty" in str(exc_info.value)

    @pytest.mark.parametrize("password", ["x", " ", "secret1"])
    def test_nonempty_password(self, password):
        assert validate_password(password) == password
