"""
API credentials held by a client for its whole lifetime.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .constants import ENV_API_KEY, ENV_API_SECRET
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class Credentials:
    """
    Immutable API key / secret pair.

    The secret is excluded from ``repr`` so it does not end up in logs or
    tracebacks.
    """

    api_key: str
    api_secret: str = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.api_key, str) or not self.api_key:
            raise ConfigurationError("api_key cannot be empty")
        if not isinstance(self.api_secret, str) or not self.api_secret:
            raise ConfigurationError("api_secret cannot be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Credentials":
        """
        Load credentials from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Credentials instance

        Raises:
            ConfigurationError: If either variable is unset or empty
        """
        if environ is None:
            environ = os.environ

        missing = [name for name in (ENV_API_KEY, ENV_API_SECRET) if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"API credentials not found in environment variables: {', '.join(missing)}"
            )
        return cls(environ[ENV_API_KEY], environ[ENV_API_SECRET])
