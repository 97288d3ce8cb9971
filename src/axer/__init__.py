"""
axer - A thin async HTTP client wrapper.

Adds persistent cookie jars, form encoding, redirect following and
resumable file downloads on top of httpx.
"""

import logging

__version__ = "1.0.0"

from axer.config import ClientConfig
from axer.http.client import RequestClient

# Library logging stays silent unless the application configures it
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["ClientConfig", "RequestClient", "__version__"]
