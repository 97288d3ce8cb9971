"""File-backed cookie storage.

Cookies are kept in the Netscape cookie file format used by browsers and
tools like curl:

    # Netscape HTTP Cookie File
    .example.com    TRUE    /    FALSE    1735689600    sessionid    abc123
"""

import logging
from http.cookiejar import MozillaCookieJar
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class FileCookieJar(MozillaCookieJar):
    """Cookie jar that is read from and written back to a single file.

    The file is created when missing. Session cookies are persisted as
    well so that a login survives a process restart.
    """

    def __init__(self, cookie_file: Union[str, Path]):
        self.path = Path(cookie_file)
        super().__init__(str(self.path))

        if self.path.exists() and self.path.stat().st_size > 0:
            self.load(ignore_discard=True, ignore_expires=True)
            logger.debug(f"Loaded {len(self)} cookies from {self.path}")
        else:
            self.persist()

    def persist(self) -> None:
        """Write every cookie in the jar to the backing file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.save(ignore_discard=True, ignore_expires=True)


def load_cookie_jar(cookie_file: Union[str, Path]) -> FileCookieJar:
    """Open the cookie jar stored at cookie_file.

    Args:
        cookie_file: Path to cookie file (Netscape format)

    Returns:
        FileCookieJar bound to the file

    Raises:
        http.cookiejar.LoadError: If the file exists but is not a cookie file
    """
    return FileCookieJar(cookie_file)
