from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class WebsiteInsight:
    """Structured summary of a fetched page's head metadata and content statistics.

    Attributes:
        url: Normalized URL that was fetched.
        title: Contents of the <title> tag, if any.
        meta: Common metadata (description, keywords, robots, og:*, twitter:*, canonical).
        meta_tag_count: Number of <meta> tags in <head>.
        link_tag_count: Number of <link> tags in <head>.
        script_tag_count: Number of <script> tags in <head>.
        heading_count: Number of h1-h6 elements in the body.
        h1_count: Number of h1 elements.
        image_count: Number of <img> elements.
        images_missing_alt: Images without a non-empty alt attribute.
        link_count: Number of <a href> elements.
        focus: Analysis focus used when building `analysis_prompt`.
        analysis_prompt: Prompt text summarizing findings for task generation.
    """

    url: str
    title: Optional[str] = None
    meta: Dict[str, Optional[str]] = field(default_factory=dict)
    meta_tag_count: int = 0
    link_tag_count: int = 0
    script_tag_count: int = 0
    heading_count: int = 0
    h1_count: int = 0
    image_count: int = 0
    images_missing_alt: int = 0
    link_count: int = 0
    focus: str = "general"
    analysis_prompt: str = ""

    @property
    def seo_flags(self) -> Dict[str, bool]:
        """Return simple pass/fail SEO checks derived from the page statistics."""
        return {
            "has_title": bool(self.title),
            "has_meta_description": bool(self.meta.get("description")),
            "has_canonical": bool(self.meta.get("canonical")),
            "has_viewport": bool(self.meta.get("viewport")),
            "has_open_graph": bool(self.meta.get("og_title") or self.meta.get("og_description")),
            "single_h1": self.h1_count == 1,
            "images_have_alt": self.images_missing_alt == 0,
        }
