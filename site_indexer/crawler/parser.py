"""
Page extraction: title, text, metadata and outbound links from HTML.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Protocol
from urllib.parse import urljoin, urldefrag, urlparse

from bs4 import BeautifulSoup, Comment

from ..errors import ExtractionError


@dataclass
class ParsedPage:
    """Fields the crawler needs from a fetched document."""
    title: str = ""
    content: str = ""
    meta_description: str = ""
    keywords: List[str] = field(default_factory=list)
    headings: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)


class PageExtractor(Protocol):
    """Anything that can turn raw HTML into a ParsedPage."""

    def extract(self, html: str, url: str) -> ParsedPage:
        ...


def resolve_url(link: str, base_url: str) -> str:
    """
    Absolute form of ``link`` relative to ``base_url``, without fragment.

    Returns an empty string for fragment-only or empty links.
    """
    link = link.strip()
    if not link or link.startswith('#'):
        return ""

    if link.startswith(('http://', 'https://')):
        absolute = link
    else:
        absolute = urljoin(base_url, link)

    return urldefrag(absolute)[0]


class HTMLPageExtractor:
    """
    BeautifulSoup (lxml) based extractor.

    Links come from anchors and from ``location.href = '...'`` script
    navigation. If the parser fails the page degrades to regex tag
    stripping rather than being dropped.
    """

    def __init__(self, parser_features: str = 'lxml'):
        self.parser_features = parser_features
        self.logger = logging.getLogger(__name__)

        self.whitespace_pattern = re.compile(r'\s+')
        self.script_link_pattern = re.compile(r'''location\.href\s*=\s*['"]([^'"]+)['"]''', re.IGNORECASE)
        self.script_block_pattern = re.compile(r'<(script|style)[^>]*>.*?</\1>', re.IGNORECASE | re.DOTALL)
        self.tag_pattern = re.compile(r'<[^>]+>')
        self.entity_pattern = re.compile(r'&\w+;')
        self.title_pattern = re.compile(r'<title[^>]*>([^<]*)</title>', re.IGNORECASE)

    def extract(self, html: str, url: str) -> ParsedPage:
        """
        Parse HTML content and extract structured data.

        Raises:
            ExtractionError: if there is no markup to work with
        """
        if not html or not html.strip():
            raise ExtractionError(url, "Empty document")

        script_links = self.script_link_pattern.findall(html)

        try:
            soup = BeautifulSoup(html, self.parser_features)
            parsed = self._extract_with_soup(soup)
            anchor_links = [a['href'] for a in soup.find_all('a', href=True)]
        except Exception as e:
            self.logger.warning(f"Falling back to plain extraction for {url}: {e}")
            parsed = self._extract_with_regex(html)
            anchor_links = []

        parsed.links = self._resolve_links(anchor_links + script_links, url)
        self.logger.debug(f"Extracted {url}: {len(parsed.content)} chars, {len(parsed.links)} links")
        return parsed

    def _extract_with_soup(self, soup: BeautifulSoup) -> ParsedPage:
        parsed = ParsedPage()

        title_tag = soup.find('title')
        if title_tag:
            parsed.title = self._clean_text(title_tag.get_text())

        meta_desc = soup.find('meta', attrs={'name': re.compile('^description$', re.I)})
        if meta_desc:
            parsed.meta_description = self._clean_text(meta_desc.get('content', ''))

        meta_keywords = soup.find('meta', attrs={'name': re.compile('^keywords$', re.I)})
        if meta_keywords:
            parsed.keywords = [
                keyword.strip() for keyword in meta_keywords.get('content', '').split(',')
                if keyword.strip()
            ]

        for element in soup(["script", "style", "noscript"]):
            element.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        parsed.headings = [
            self._clean_text(h.get_text(' ')) for h in soup.find_all(re.compile('^h[1-6]$'))
            if h.get_text().strip()
        ]

        body = soup.find('body') or soup
        parsed.content = self._clean_text(body.get_text(separator=' '))
        return parsed

    def _extract_with_regex(self, html: str) -> ParsedPage:
        title_match = self.title_pattern.search(html)
        text = self.script_block_pattern.sub('', html)
        text = self.tag_pattern.sub(' ', text)
        text = self.entity_pattern.sub(' ', text)
        return ParsedPage(
            title=title_match.group(1).strip() if title_match else "",
            content=self._clean_text(text)
        )

    def _resolve_links(self, raw_links: List[str], base_url: str) -> List[str]:
        links = []
        seen = set()
        for raw in raw_links:
            try:
                resolved = resolve_url(raw, base_url)
                scheme = urlparse(resolved).scheme
            except ValueError as e:
                self.logger.debug(f"Skipping malformed link {raw!r} on {base_url}: {e}")
                continue
            if resolved and resolved not in seen and scheme in ('http', 'https'):
                seen.add(resolved)
                links.append(resolved)
        return links

    def _clean_text(self, text: str) -> str:
        if not text:
            return ""
        return self.whitespace_pattern.sub(' ', text).strip()
