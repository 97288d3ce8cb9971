"""HTTP client infrastructure for axer (async-only).

Uses httpx directly; this package only adds cookie persistence, form
encoding, redirect following and file download on top.
"""

from axer.http.client import RequestClient, create_client
from axer.http.cookies import FileCookieJar, load_cookie_jar
from axer.http.download import DownloadManager, DownloadTask, stream_to_file
from axer.http.forms import decode_uri_form, encode_uri_form, parse_form
from axer.http.headers import build_headers, load_headers_from_file
from axer.http.redirects import follow_redirect

__all__ = [
    "RequestClient",
    "create_client",
    "FileCookieJar",
    "load_cookie_jar",
    "DownloadManager",
    "DownloadTask",
    "stream_to_file",
    "decode_uri_form",
    "encode_uri_form",
    "parse_form",
    "build_headers",
    "load_headers_from_file",
    "follow_redirect",
]
