"""Pure domain utilities: formats, codes, pages.

Nothing in here knows about FastAPI or HTTP requests, so the negotiation and
file-fallback rules can be unit-tested against plain strings and directories.
"""
__all__ = ["formats", "codes", "pages"]
