"""Configuration management for axer."""

import os
from dataclasses import dataclass, field, fields, replace
from http.cookiejar import CookieJar
from typing import Any, Dict, Mapping, Optional

# httpx.AsyncClient keywords that map onto config fields
_FIELD_ALIASES = {'verify': 'verify_ssl'}

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_12_3) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/56.0.2924.87 Safari/537.36"
)


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a RequestClient.

    Instances are immutable. Use merge() to derive a config with
    caller-supplied overrides applied on top.
    """

    # Request defaults
    headers: Dict[str, str] = field(default_factory=dict)
    user_agent: str = DEFAULT_USER_AGENT
    gzip: bool = True
    timeout: Optional[int] = 20000  # milliseconds, None disables

    # Cookies and headers loaded from disk
    cookie_file: Optional[str] = None
    header_file: Optional[str] = None
    jar: Optional[CookieJar] = None

    # Transport settings
    verify_ssl: bool = True
    proxy: Optional[str] = None

    # Redirects
    follow_redirects: bool = True
    max_redirects: int = 10

    # Extra keyword arguments for httpx.AsyncClient (e.g. transport)
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration and fill environment defaults."""
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"Invalid timeout: {self.timeout}")
        if self.max_redirects < 0:
            raise ValueError(f"Invalid max_redirects: {self.max_redirects}")

        # Setup proxy from environment if not specified
        if not self.proxy:
            env_proxy = os.environ.get('HTTPS_PROXY') or os.environ.get('HTTP_PROXY')
            object.__setattr__(self, 'proxy', env_proxy)

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Timeout in seconds as httpx expects it, or None to disable."""
        if self.timeout is None:
            return None
        return self.timeout / 1000

    def merge(self, overrides: Optional[Mapping[str, Any]] = None) -> "ClientConfig":
        """Return a new config with overrides applied.

        Caller values win over the values already in this config. The
        ``headers`` and ``options`` mappings are merged key-wise; keys that
        are not config fields are collected into ``options`` and handed to
        httpx unchanged, except ``verify`` which sets ``verify_ssl``.

        Args:
            overrides: Mapping of config fields or httpx.AsyncClient keywords

        Returns:
            New ClientConfig instance
        """
        if not overrides:
            return self

        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        options = dict(self.options)

        for key, value in overrides.items():
            key = _FIELD_ALIASES.get(key, key)
            if key == 'headers':
                changes['headers'] = {**self.headers, **(value or {})}
            elif key == 'options':
                options.update(value or {})
            elif key in known:
                changes[key] = value
            else:
                options[key] = value

        changes['options'] = options
        return replace(self, **changes)
