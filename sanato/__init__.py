"""Sanato - multi-module file-serving daemon.

Bootstraps persistent configuration and a credential store (running an
interactive first-run wizard when either is missing), then composes the
authentication API, the WebDAV endpoint and the file API onto one shared
HTTP router.
"""

from sanato.core.constants import SANATO_VERSION

__version__ = SANATO_VERSION

__all__ = ["__version__"]
