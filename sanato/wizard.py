#!/usr/bin/env python3
"""Interactive first-run setup for Sanato.

This module runs only when the config file or the credential file is
missing:
- ConfigWizard: asks for port, directories and the web URL prefix, then
  builds a Config with a freshly generated token secret
- UserWizard: asks for the first account's details
- create_config_file / create_user: run a wizard and persist the result

Prompts are read line by line from an input stream. Any read failure or
invalid port aborts the whole setup; nothing is re-prompted. The
defaulting and validation rules live in sanato.core.validators.

Example:
    >>> config = create_config_file(ConfigProvider("config.json"))
    Enter port [8000]:
"""

import getpass
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from sanato.auth.credentials import CredentialStore, User
from sanato.core.config import Config, ConfigProvider
from sanato.core.constants import (
    DEFAULT_PORT,
    DEFAULT_ROOT_DATA_DIR,
    DEFAULT_ROOT_TEMP_DIR,
    DEFAULT_TOKEN_CIPHER_SUITE,
    DEFAULT_WEB_DIR,
    DEFAULT_WEB_URL,
)
from sanato.core.errors import PromptError
from sanato.core.logging import Logger, get_logger
from sanato.core.validators import (
    generate_secret,
    resolve_dir,
    resolve_port,
    resolve_web_url,
)


class Prompter:
    """Reads answers from an input stream, echoing prompts to an output stream."""

    def __init__(self, input: Optional[TextIO] = None, output: Optional[TextIO] = None):
        self.input = input or sys.stdin
        self.output = output or sys.stdout

    def ask(self, prompt: str) -> str:
        """Ask one question.

        Returns:
            The answer without its line terminator

        Raises:
            PromptError: On end of input or a stream error
        """
        self.output.write(prompt)
        self.output.flush()
        try:
            line = self.input.readline()
        except (OSError, ValueError) as e:
            raise PromptError(f"Failed to read input: {e}")
        if not line:
            raise PromptError("Unexpected end of input")
        return line.rstrip("\r\n")

    def ask_secret(self, prompt: str) -> str:
        """Ask a question without echoing the answer when on a terminal."""
        if self.input is sys.stdin and self.input.isatty():
            try:
                return getpass.getpass(prompt, stream=self.output)
            except (EOFError, OSError) as e:
                raise PromptError(f"Failed to read input: {e}")
        return self.ask(prompt)


class ConfigWizard:
    """Collects a new server configuration."""

    def __init__(self, prompter: Prompter):
        self.prompter = prompter

    def run(self) -> Config:
        """Prompt for every setting and build the Config.

        Raises:
            PromptError: If input cannot be read
            PortParseError: If the port answer is invalid
        """
        ask = self.prompter.ask
        port_text = ask(f"Enter port [{DEFAULT_PORT}]: ")
        port = resolve_port(port_text)

        root_data_dir = resolve_dir(
            ask(f"Enter root data directory [{DEFAULT_ROOT_DATA_DIR}]: "), DEFAULT_ROOT_DATA_DIR
        )
        root_temp_dir = resolve_dir(
            ask(f"Enter root temporary directory [{DEFAULT_ROOT_TEMP_DIR}]: "), DEFAULT_ROOT_TEMP_DIR
        )
        web_url = resolve_web_url(ask(f"Enter web URL prefix [{DEFAULT_WEB_URL}]: "))
        web_dir = resolve_dir(ask(f"Enter web directory [{DEFAULT_WEB_DIR}]: "), DEFAULT_WEB_DIR)

        return Config(
            port=port,
            root_data_dir=root_data_dir,
            root_temp_dir=root_temp_dir,
            token_secret=generate_secret(),
            token_cipher_suite=DEFAULT_TOKEN_CIPHER_SUITE,
            web_url=web_url,
            web_dir=web_dir,
        )


@dataclass
class UserDraft:
    """First-account answers; holds the plaintext only until hashing."""

    username: str
    password: str
    display_name: str
    email: str

    def __repr__(self) -> str:
        return f"UserDraft(username={self.username!r}, display_name={self.display_name!r})"


class UserWizard:
    """Collects the first administrative account."""

    def __init__(self, prompter: Prompter):
        self.prompter = prompter

    def run(self) -> UserDraft:
        """Prompt for the account details.

        Raises:
            PromptError: If input cannot be read
        """
        username = self.prompter.ask("Enter username: ").strip()
        password = self.prompter.ask_secret("Enter password: ")
        display_name = self.prompter.ask("Enter display name: ").strip()
        email = self.prompter.ask("Enter email: ").strip()
        return UserDraft(username, password, display_name, email)


def create_config_file(
    provider: ConfigProvider,
    prompter: Optional[Prompter] = None,
    logger: Optional[Logger] = None,
) -> Config:
    """Run the config wizard and persist its result.

    Args:
        provider: Config provider whose file is missing
        prompter: Source of answers (defaults to stdin/stdout)
        logger: Logger instance

    Returns:
        The persisted Config

    Raises:
        PromptError, PortParseError, ConfigExistsError, StoreIOError
    """
    logger = logger or get_logger()
    logger.warning("No configuration file found, creating one", path=str(provider.path))

    config = ConfigWizard(prompter or Prompter()).run()
    provider.create_new_config(config)
    config = provider.get()

    logger.info("Configuration created", path=str(provider.path), port=config.port)
    return config


def create_user(
    store: CredentialStore,
    prompter: Optional[Prompter] = None,
    logger: Optional[Logger] = None,
) -> User:
    """Run the user wizard and persist the first account.

    Args:
        store: Credential store whose file is missing
        prompter: Source of answers (defaults to stdin/stdout)
        logger: Logger instance

    Returns:
        The persisted User (password hashed)

    Raises:
        PromptError, CredentialError, HashError, StoreIOError
    """
    logger = logger or get_logger()
    logger.warning("No authentication file found, creating one", path=str(store.path))

    draft = UserWizard(prompter or Prompter()).run()
    user = store.create_user(draft.username, draft.password, draft.display_name, draft.email)

    logger.info("User created", username=user.username, path=str(store.path))
    return user
