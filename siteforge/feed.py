from __future__ import annotations

import datetime as dt
import html
from typing import Optional

from .utils import iso_date, join_path, join_url

FEED_PATH = "/feeds/blog.atom"
FEED_GENERATOR = "siteforge"


def feed_links() -> list[dict]:
    return [{"url": FEED_PATH, "name": "Atom feed"}]


def build_feed_entries(posts: list[dict], site_url: str, base_dir: str) -> list[dict]:
    entries = []
    for post in reversed(posts):
        link = join_url(site_url, join_path(base_dir, post["url"] or ""))
        published = post.get("published")
        entries.append(
            {
                "title": post.get("title") or "",
                "id": link,
                "link": link,
                "description": post.get("snippet") or "",
                "content": post.get("html") or "",
                "author": post.get("author") or "",
                "categories": list(post.get("topics") or []),
                "published": published,
                "updated": post.get("updated") or published,
            }
        )
    return entries


def _latest(entries: list[dict]) -> Optional[dt.datetime]:
    stamps = [entry["updated"] for entry in entries if entry["updated"] is not None]
    if not stamps:
        return None
    return max(stamps, key=lambda value: iso_date(value))


def render_atom(entries: list[dict], meta: dict) -> str:
    site_url = meta["site_url"]
    feed_url = join_url(site_url, FEED_PATH)
    site_link = join_url(site_url, join_path(meta["base_dir"]))
    updated = _latest(entries) or dt.datetime.now(dt.timezone.utc)

    lines = [
        '<?xml version="1.0" encoding="utf-8"?>',
        '<feed xmlns="http://www.w3.org/2005/Atom">',
        f"<id>{html.escape(feed_url)}</id>",
        f"<title>{html.escape(meta['title'])}</title>",
        f"<updated>{iso_date(updated)}</updated>",
        f"<generator>{FEED_GENERATOR}</generator>",
        f'<link rel="alternate" href="{html.escape(site_link)}" />',
        f'<link rel="self" href="{html.escape(feed_url)}" />',
        f"<subtitle>{html.escape(meta['description'])}</subtitle>",
        f"<icon>{html.escape(join_url(site_url, 'favicon.ico'))}</icon>",
        f"<logo>{html.escape(join_url(site_url, 'static/img/icon.png'))}</logo>",
        "<author>",
        f"<name>{html.escape(meta['author'])}</name>",
        f"<uri>{html.escape(join_url(site_url, '/'))}</uri>",
        "</author>",
    ]
    for entry in entries:
        lines.append("<entry>")
        lines.append(f"<title type=\"html\">{html.escape(entry['title'])}</title>")
        lines.append(f"<id>{html.escape(entry['id'])}</id>")
        lines.append(f'<link href="{html.escape(entry["link"])}" />')
        lines.append(f"<updated>{iso_date(entry['updated'] or updated)}</updated>")
        lines.append(f"<summary type=\"html\">{html.escape(entry['description'])}</summary>")
        lines.append(f"<content type=\"html\">{html.escape(entry['content'])}</content>")
        lines.append(f"<author><name>{html.escape(entry['author'])}</name></author>")
        for term in entry["categories"]:
            lines.append(f'<category term="{html.escape(term)}" />')
        if entry["published"] is not None:
            lines.append(f"<published>{iso_date(entry['published'])}</published>")
        lines.append("</entry>")
    lines.append("</feed>")
    return "\n".join(lines)
