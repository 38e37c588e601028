"""
Scheme, domain and pattern checks applied to every URL before it is queued.
"""

import re
import logging
from typing import Iterable, List, Optional, Pattern
from urllib.parse import urlparse

from ..errors import ValidationError
from ..utils.config import DEFAULT_EXCLUDE_PATTERNS


ALLOWED_SCHEMES = ('http', 'https')


class URLFilter:
    """
    Decides whether a URL may be crawled.

    An empty ``allowed_domains`` means any host is accepted. Exclude
    patterns must match the whole URL to reject it.
    """

    def __init__(self, allowed_domains: Optional[Iterable[str]] = None,
                 exclude_patterns: Optional[Iterable[str]] = None):
        self.allowed_domains = {d.lower() for d in allowed_domains} if allowed_domains else set()
        if exclude_patterns is None:
            exclude_patterns = DEFAULT_EXCLUDE_PATTERNS
        self.exclude_patterns: List[Pattern] = [
            p if isinstance(p, re.Pattern) else re.compile(p) for p in exclude_patterns
        ]
        self.logger = logging.getLogger(__name__)

    def check(self, url: str):
        """Raise ValidationError with the rejection reason."""
        try:
            parsed = urlparse(url)
            host = parsed.hostname
        except ValueError as e:
            raise ValidationError(url, "Unparseable URL", e) from e

        if parsed.scheme not in ALLOWED_SCHEMES:
            raise ValidationError(url, f"Disallowed scheme '{parsed.scheme}'")

        if not host:
            raise ValidationError(url, "Missing host")

        if self.allowed_domains and host.lower() not in self.allowed_domains:
            raise ValidationError(url, f"Domain '{host}' not allowed")

        for pattern in self.exclude_patterns:
            if pattern.fullmatch(url):
                raise ValidationError(url, f"Excluded by pattern '{pattern.pattern}'")

    def is_allowed(self, url: str) -> bool:
        try:
            self.check(url)
        except ValidationError as e:
            self.logger.debug(str(e))
            return False
        return True
