"""RequestClient: a small async facade over httpx (async-only).

The client is configured once at construction and reused for every call.
Redirects, cookie handling, gzip decoding and timeouts are all left to
httpx; this module only decides how requests are built and what gets
persisted between them.

Example:
    >>> async with RequestClient("cookies.txt") as client:
    ...     response = await client.get("https://example.com/search", {"q": "books"})
    ...     await client.download("https://example.com/a.pdf", "downloads/a.pdf")
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import httpx

from axer.config import ClientConfig
from axer.http.cookies import FileCookieJar, load_cookie_jar
from axer.http.download import stream_to_file
from axer.http.forms import decode_uri_form, encode_uri_form, parse_form
from axer.http.headers import build_headers
from axer.http.redirects import follow_redirect

logger = logging.getLogger(__name__)

ConfigLike = Union[ClientConfig, Mapping[str, Any], None]


def create_client(config: ClientConfig, cookies=None, event_hooks=None) -> httpx.AsyncClient:
    """Create an async httpx client from configuration.

    Automatic redirects are disabled on the client itself; get() and post()
    follow them through follow_redirect() and download() asks httpx to
    follow them per request.

    Caller ``cookies`` and ``event_hooks`` in ``config.options`` are
    combined with the ones given here: the cookies are copied into the
    shared jar and the hooks run after the given hooks for each event.

    Args:
        config: Configuration object
        cookies: Cookie jar to share with the client
        event_hooks: httpx event hooks

    Returns:
        Configured httpx.AsyncClient instance
    """
    options = dict(config.options)
    extra_cookies = options.pop('cookies', None)

    hooks = {event: list(funcs) for event, funcs in (event_hooks or {}).items()}
    for event, funcs in (options.pop('event_hooks', None) or {}).items():
        hooks.setdefault(event, []).extend(funcs)

    if config.proxy and 'transport' not in options and 'mounts' not in options:
        options.setdefault('proxy', config.proxy)

    client = httpx.AsyncClient(
        headers=build_headers(config),
        cookies=cookies,
        timeout=config.timeout_seconds,
        verify=config.verify_ssl,
        follow_redirects=False,
        max_redirects=config.max_redirects,
        event_hooks=hooks,
        **options,
    )
    if extra_cookies:
        client.cookies.update(extra_cookies)
    return client


class RequestClient:
    """Promise-style GET, POST and download over one configured httpx client.

    Attributes:
        config: Effective configuration (defaults with caller overrides)
        jar: Persistent cookie jar, or None when no cookie file is used
        client: The underlying httpx.AsyncClient
    """

    def __init__(
        self,
        cookie_path: Optional[Union[str, Path]] = None,
        config: ConfigLike = None,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize the client.

        Args:
            cookie_path: Cookie jar file path. Without it (and without
                ``cookie_file`` in config) no cookies are persisted.
            config: ClientConfig, or a mapping of overrides such as
                ``headers``, ``gzip``, ``timeout`` (ms), ``jar`` or any
                httpx.AsyncClient keyword. Caller values win over defaults.
            log: Logger for request messages (defaults to a silent
                module logger)
        """
        if isinstance(config, ClientConfig):
            self.config = config
        else:
            self.config = ClientConfig().merge(config)

        if cookie_path is not None:
            self.config = self.config.merge({'cookie_file': str(cookie_path)})

        self.log = log or logger

        self.jar: Optional[FileCookieJar] = None
        if self.config.cookie_file:
            self.jar = load_cookie_jar(self.config.cookie_file)

        event_hooks = {}
        if self.jar is not None:
            event_hooks['response'] = [self._persist_cookies]

        self.client = create_client(
            self.config,
            cookies=self.jar if self.jar is not None else self.config.jar,
            event_hooks=event_hooks,
        )

    async def _persist_cookies(self, response: httpx.Response) -> None:
        # httpx has already extracted Set-Cookie into the shared jar
        self.jar.persist()

    async def _follow(self, response: httpx.Response) -> httpx.Response:
        if not self.config.follow_redirects:
            return response
        return await follow_redirect(response, self.client, self.config.max_redirects)

    async def get(self, url: str, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        """Request server with GET method.

        Args:
            url: Request URL
            params: Query string mapping; every value is percent-encoded

        Returns:
            Final httpx.Response after redirects
        """
        if isinstance(params, Mapping):
            qs = encode_uri_form(params)
            if qs:
                url = f"{url}{'&' if '?' in url else '?'}{qs}"

        self.log.info(f"GET {url}")
        response = await self.client.get(url)
        return await self._follow(response)

    async def post(self, url: str, form: Any = None) -> httpx.Response:
        """Request server with POST method.

        Args:
            url: Request URL
            form: Mapping (values are percent-decoded first) or raw
                x-www-form-urlencoded string. Anything else is passed to
                httpx unchanged.

        Returns:
            Final httpx.Response after redirects
        """
        if isinstance(form, Mapping):
            form = decode_uri_form(form)
        elif isinstance(form, str):
            form = parse_form(form)

        self.log.info(f"POST {url}")
        self.log.info(f"Body: {form}")
        response = await self.client.post(url, data=form)
        return await self._follow(response)

    async def download(self, url: str, file_path: Union[str, Path]) -> str:
        """Download url into file_path.

        Nothing is requested when a file already exists at file_path.

        Args:
            url: Download URL
            file_path: Where to save the file

        Returns:
            The url that was downloaded

        Raises:
            httpx.HTTPStatusError: If the server answers with a non-2xx status
            httpx.HTTPError: On connection or stream errors
        """
        dest_path = Path(file_path)
        if dest_path.exists():
            self.log.debug(f"Already downloaded: {dest_path}")
            return url

        self.log.info(f"GET {url} -> {dest_path}")
        await stream_to_file(
            self.client,
            url,
            dest_path,
            follow_redirects=self.config.follow_redirects,
            log=self.log,
        )
        return url

    async def aclose(self) -> None:
        """Close the underlying client and flush cookies to disk."""
        await self.client.aclose()
        if self.jar is not None:
            self.jar.persist()

    async def __aenter__(self) -> "RequestClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()
