"""Fetch pages and search results for the conversation's web tool."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import re
import socket
import urllib.parse
from typing import List, Optional

import requests

from models.website_insight import WebsiteInsight
from services.web.page_analyzer import (
    build_analysis_prompt,
    format_insight_for_query,
    format_search_results,
    parse_search_results,
    parse_website_insight,
)

LOGGER = logging.getLogger(__name__)

USER_AGENT = "TaskPlanner/1.0 (+website insight)"
HEADERS = {"User-Agent": USER_AGENT}
BLOCKED_HOSTS = {"localhost", "localhost.localdomain", "ip6-localhost", "metadata.google.internal"}
BLOCKED_HOST_SUFFIXES = (".local", ".internal", ".home", ".lan")
SEARCH_URL = "https://duckduckgo.com/html/?q={query}"

URL_PATTERN = re.compile(r"https?://[^\s]+")
SITE_PATTERN = re.compile(r"site:([a-zA-Z0-9.-]+)")


class WebsiteInsightError(RuntimeError):
    """Raised when a page cannot be fetched or analyzed."""


def extract_urls(text: str) -> List[str]:
    """Return http(s) URLs in order of appearance, without trailing punctuation."""
    return [match.rstrip(".,;:!?)]}'\"") for match in URL_PATTERN.findall(text or "")]


def normalize_url(url: str) -> str:
    url = (url or "").strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def assert_safe_remote_url(url: str) -> None:
    """Reject non-http(s) URLs and targets that resolve to private addresses.

    Raises:
        ValueError: If the URL must not be fetched.
    """
    parsed = urllib.parse.urlparse(url.strip())
    scheme = (parsed.scheme or "").lower()
    if scheme not in {"http", "https"}:
        raise ValueError("Only http/https URLs are allowed")

    host = (parsed.hostname or "").strip().lower().strip(".")
    if not host:
        raise ValueError("URL host is missing")
    if host in BLOCKED_HOSTS or host.endswith(BLOCKED_HOST_SUFFIXES):
        raise ValueError(f"Blocked private host target: {host}")
    if _looks_like_ip(host) and _ip_is_non_public(host):
        raise ValueError(f"Blocked non-public IP target: {host}")

    port = parsed.port or (443 if scheme == "https" else 80)
    try:
        resolved = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError:
        return

    for item in resolved:
        sockaddr = item[4]
        if not sockaddr:
            continue
        ip = str(sockaddr[0]).split("%", 1)[0]
        if _ip_is_non_public(ip):
            raise ValueError(f"Blocked non-public resolved address for {host}: {ip}")


def _looks_like_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host.split("%", 1)[0])
        return True
    except ValueError:
        return False


def _ip_is_non_public(value: str) -> bool:
    return not ipaddress.ip_address(value.split("%", 1)[0]).is_global


class WebsiteInsightProvider:
    """Analyze user-supplied websites and run text searches for the model."""

    def __init__(self, timeout: float = 20.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch(self, url: str) -> str:
        assert_safe_remote_url(url)
        response = self.session.get(url, timeout=self.timeout, headers=HEADERS)
        response.raise_for_status()
        return response.text

    async def analyze(self, url: str) -> WebsiteInsight:
        """Return head metadata and content statistics for a page.

        Raises:
            WebsiteInsightError: If the URL is blocked, unreachable, or not HTML.
        """
        target = normalize_url(url)
        LOGGER.info("Starting website analysis of %s", target)
        try:
            html = await asyncio.to_thread(self._fetch, target)
        except (ValueError, requests.RequestException) as exc:
            raise WebsiteInsightError(f"Failed to load {target}: {exc}") from exc
        return parse_website_insight(target, html)

    async def analyze_for_tasks(self, url: str, focus: str = "general") -> WebsiteInsight:
        """Analyze a page and attach the task-generation analysis prompt."""
        insight = await self.analyze(url)
        insight.focus = focus
        insight.analysis_prompt = build_analysis_prompt(insight, focus)
        return insight

    async def search(self, query: str) -> str:
        """Return a plain-text result for a search tool call; never raises.

        A URL in the query is analyzed directly, a ``site:domain`` token is
        analyzed as that domain, anything else runs a text search.
        """
        urls = extract_urls(query)
        site = SITE_PATTERN.search(query or "")
        target = urls[0] if urls else (normalize_url(site.group(1)) if site else None)

        if target:
            try:
                insight = await self.analyze(target)
            except WebsiteInsightError as exc:
                LOGGER.warning("Website lookup failed for %r: %s", query, exc)
                return f"I couldn't find specific information about \"{query}\". Let me help based on my general knowledge."
            return format_insight_for_query(query, insight)

        try:
            html = await asyncio.to_thread(self._search_html, query)
        except (ValueError, requests.RequestException) as exc:
            LOGGER.error("Error in web search: %s", exc)
            return (
                f"I encountered an error while researching \"{query}\". "
                "Let me provide information based on my general knowledge."
            )
        rows = parse_search_results(html)
        if not rows:
            return f"I couldn't find specific information about \"{query}\". Let me help based on my general knowledge."
        return format_search_results(query, rows)

    def _search_html(self, query: str) -> str:
        url = SEARCH_URL.format(query=urllib.parse.quote_plus(query or ""))
        response = self.session.get(url, timeout=self.timeout, headers=HEADERS)
        response.raise_for_status()
        return response.text
