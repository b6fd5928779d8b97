"""Turn fetched HTML into a WebsiteInsight and the prompts built from it."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from models.website_insight import WebsiteInsight

FOCUS_KEYWORDS = {
    "seo": ("seo", "search engine", "ranking"),
    "content": ("content", "writing", "blog"),
    "ux": ("design", "experience", "ux", "ui"),
}

_META_NAMES = {
    "description": "description",
    "keywords": "keywords",
    "viewport": "viewport",
    "robots": "robots",
    "twitter:card": "twitter_card",
    "twitter:title": "twitter_title",
    "twitter:description": "twitter_description",
    "twitter:image": "twitter_image",
}
_META_PROPERTIES = {
    "og:title": "og_title",
    "og:description": "og_description",
    "og:image": "og_image",
}


def parse_website_insight(url: str, html: str) -> WebsiteInsight:
    """Extract head metadata and body statistics from a page."""
    soup = BeautifulSoup(html or "", "html.parser")
    head = soup.head or soup

    meta: Dict[str, Optional[str]] = {key: None for key in (*_META_NAMES.values(), *_META_PROPERTIES.values())}
    meta["canonical"] = None
    meta_tags = head.find_all("meta")
    for tag in meta_tags:
        name = (tag.get("name") or "").strip().lower()
        prop = (tag.get("property") or "").strip().lower()
        content = tag.get("content")
        if name in _META_NAMES:
            meta[_META_NAMES[name]] = content
        if prop in _META_PROPERTIES:
            meta[_META_PROPERTIES[prop]] = content

    link_tags = head.find_all("link")
    for link in link_tags:
        rel = link.get("rel") or []
        rel_values = rel if isinstance(rel, list) else [rel]
        if "canonical" in [value.lower() for value in rel_values]:
            meta["canonical"] = link.get("href")

    title_tag = soup.find("title")
    images = soup.find_all("img")
    return WebsiteInsight(
        url=url,
        title=title_tag.get_text(strip=True) if title_tag else None,
        meta=meta,
        meta_tag_count=len(meta_tags),
        link_tag_count=len(link_tags),
        script_tag_count=len(head.find_all("script")),
        heading_count=len(soup.find_all(re.compile(r"^h[1-6]$"))),
        h1_count=len(soup.find_all("h1")),
        image_count=len(images),
        images_missing_alt=sum(1 for img in images if not (img.get("alt") or "").strip()),
        link_count=len(soup.find_all("a", href=True)),
    )


def detect_analysis_focus(user_texts: List[str]) -> str:
    """Pick seo/content/ux/general from keywords across the user's messages."""
    conversation = " ".join(text.lower() for text in user_texts)
    for focus, keywords in FOCUS_KEYWORDS.items():
        if any(keyword in conversation for keyword in keywords):
            return focus
    return "general"


def build_analysis_prompt(insight: WebsiteInsight, focus: str = "general") -> str:
    """Return the analysis prompt used to ground task generation in the page findings.

    Sections are separated by blank lines; the first three form the summary
    shown in the conversation.
    """
    meta = insight.meta
    flags = insight.seo_flags
    issues = []
    if not flags["has_title"]:
        issues.append("- The page has no <title> tag.")
    if not flags["has_meta_description"]:
        issues.append("- The page has no meta description.")
    if not flags["has_canonical"]:
        issues.append("- No canonical URL is declared.")
    if not flags["has_viewport"]:
        issues.append("- No viewport meta tag, so mobile rendering may suffer.")
    if not flags["has_open_graph"]:
        issues.append("- Open Graph tags are missing, so social previews will be generic.")
    if not flags["single_h1"]:
        issues.append(f"- The page has {insight.h1_count} h1 headings (exactly one is recommended).")
    if not flags["images_have_alt"]:
        issues.append(f"- {insight.images_missing_alt} of {insight.image_count} images have no alt text.")
    if not issues:
        issues.append("- No obvious head-tag issues were found.")

    focus_line = {
        "seo": "Focus the tasks on search engine visibility and ranking.",
        "content": "Focus the tasks on content quality, writing and publishing cadence.",
        "ux": "Focus the tasks on design, navigation and user experience.",
    }.get(focus, "Cover the most impactful improvements for this site.")

    sections = [
        f"Website analysis for {insight.url}",
        f"Title: {insight.title or 'Not available'}\nMeta description: {meta.get('description') or 'Not found'}",
        "Potential issues:\n" + "\n".join(issues),
        (
            "Page statistics:\n"
            f"- Meta tags: {insight.meta_tag_count}\n"
            f"- Link tags: {insight.link_tag_count}\n"
            f"- Script tags: {insight.script_tag_count}\n"
            f"- Headings: {insight.heading_count}\n"
            f"- Images: {insight.image_count}\n"
            f"- Links: {insight.link_count}"
        ),
        focus_line,
    ]
    return "\n\n".join(sections)


def summarize_analysis(prompt: str, sections: int = 3) -> str:
    return "\n\n".join(prompt.split("\n\n")[:sections])


def format_insight_for_query(query: str, insight: WebsiteInsight) -> str:
    """Render an insight as the plain-text result of a search tool call."""
    meta = insight.meta
    lines = [
        f'Information about "{query}" from {insight.url}:',
        "",
        f"Title: {insight.title or 'Not available'}",
        "",
        "Metadata:",
        f"- Description: {meta['description']}" if meta.get("description") else "- No description found",
    ]
    if meta.get("keywords"):
        lines.append(f"- Keywords: {meta['keywords']}")
    if meta.get("canonical"):
        lines.append(f"- Canonical URL: {meta['canonical']}")
    lines += ["", "SEO Information:"]
    lines.append(f"- Robots Directive: {meta['robots']}" if meta.get("robots") else "- No robots directive found")
    if meta.get("og_title"):
        lines.append(f"- OG Title: {meta['og_title']}")
    if meta.get("og_description"):
        lines.append(f"- OG Description: {meta['og_description']}")
    lines += [
        "",
        "Head Tag Statistics:",
        f"- Meta Tags: {insight.meta_tag_count}",
        f"- Link Tags: {insight.link_tag_count}",
        f"- Script Tags: {insight.script_tag_count}",
    ]
    return "\n".join(lines)


def parse_search_results(html: str, max_results: int = 5) -> List[Dict[str, str]]:
    """Parse DuckDuckGo HTML results into title/url/snippet rows."""
    soup = BeautifulSoup(html or "", "html.parser")
    rows: List[Dict[str, str]] = []
    for result in soup.select(".result"):
        link = result.select_one("a.result__a")
        if not link:
            continue
        href = (link.get("href") or "").strip()
        if not href:
            continue
        snippet = result.select_one(".result__snippet")
        rows.append(
            {
                "title": link.get_text(" ", strip=True),
                "url": href,
                "snippet": snippet.get_text(" ", strip=True) if snippet else "",
            }
        )
        if len(rows) >= max_results:
            break
    return rows


def format_search_results(query: str, rows: List[Dict[str, str]]) -> str:
    lines = [f'Search results for "{query}":']
    for index, row in enumerate(rows, start=1):
        lines.append(f"{index}) {row['title']} ({row['url']})")
        if row.get("snippet"):
            lines.append(f"   {row['snippet']}")
    return "\n".join(lines)
