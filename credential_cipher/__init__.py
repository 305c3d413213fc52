"""Credential Cipher — at-rest encryption of integration credentials."""
from .version import __version__

__all__ = ["__version__"]
