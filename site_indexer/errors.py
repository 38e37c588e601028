"""
Error taxonomy for the site indexer.
"""

from typing import Optional


class SiteIndexerError(Exception):
    """Base class for all site indexer errors."""
    pass


class ConfigError(SiteIndexerError):
    """Invalid configuration or unparseable seed URL."""
    pass


class _URLError(SiteIndexerError):
    """Error bound to a single URL."""

    def __init__(self, url: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason
        self.cause = cause


class FetchError(_URLError):
    """Network failure, timeout, bad status or non-HTML content."""
    pass


class ExtractionError(_URLError):
    """Markup could not be turned into a page."""
    pass


class ValidationError(_URLError):
    """URL rejected by scheme, domain or exclude pattern."""
    pass
