"""Default request headers and header file loading."""

from pathlib import Path
from typing import Dict, Union

import httpx

from axer.config import ClientConfig


def load_headers_from_file(header_file: Union[str, Path]) -> Dict[str, str]:
    """Load HTTP headers from a file of ``Name: value`` lines.

    Blank lines and lines starting with '#' are ignored. A missing file
    yields no headers.

    Example file format:
        Accept: application/json
        Referer: https://example.com/
    """
    headers: Dict[str, str] = {}
    header_path = Path(header_file)

    if not header_path.exists():
        return headers

    for line in header_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or ':' not in line:
            continue
        name, value = line.split(':', 1)
        headers[name.strip()] = value.strip()

    return headers


def build_headers(config: ClientConfig) -> httpx.Headers:
    """Assemble the headers every request is sent with.

    Precedence, lowest first: User-Agent from config, header file,
    explicit config headers. Names are compared case-insensitively.
    """
    headers = httpx.Headers({"User-Agent": config.user_agent})
    if not config.gzip:
        headers['Accept-Encoding'] = 'identity'

    if config.header_file:
        for name, value in load_headers_from_file(config.header_file).items():
            headers[name] = value

    for name, value in config.headers.items():
        headers[name] = value
    return headers
