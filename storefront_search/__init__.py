"""Fuzzy multilingual product search for the storefront catalog."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("storefront-search-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0"
