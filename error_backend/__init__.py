"""Default backend that renders static error pages for an ingress proxy.

The proxy forwards failed requests here with ``X-Code`` / ``X-Format``
headers; we answer with the matching file from the pages directory.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("error-backend")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
