"""
Detecting the package's own version.

The version is determined only once at startup when the code is loaded.
It is used to self-identify in the API requests (the ``User-Agent`` header).
"""
import importlib.metadata
from typing import Optional

version: Optional[str] = None

try:
    name, *_ = __name__.split('.')  # usually "kubrest", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # not installed, e.g. run from a source checkout.
