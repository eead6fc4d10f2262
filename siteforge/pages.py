from __future__ import annotations

import datetime as dt
import html
import sys
from pathlib import Path
from typing import Callable, Optional

from .content import list_input_files, parse_blog_post, sanitize_string
from .feed import build_feed_entries, feed_links, render_atom
from .index import BlogIndex, GalleryIndex
from .paginate import paginate
from .render import render_template, write_text
from .utils import display_date, join_path

CORE_PAGES = (
    ("contact.md", "contact"),
    ("hfge.md", "projects/hfge"),
)


def output_path(output_dir: Path, url_path: str, filename: str = "index.html") -> Path:
    segments = [segment for segment in url_path.split("/") if segment not in {"", ".", ".."}]
    return output_dir.joinpath(*segments, filename)


def build_feed_head(feeds: list[dict]) -> str:
    return "".join(
        f'<link rel="alternate" type="application/atom+xml" title="{html.escape(feed["name"])}" '
        f'href="{feed["url"]}" />'
        for feed in feeds
    )


def render_page(
    base_template: str,
    args: object,
    title: str,
    content: str,
    sidebar: str = "",
    extra_head: str = "",
) -> str:
    return render_template(
        base_template,
        title=html.escape(title),
        site_name=html.escape(args.site_name),
        site_description=html.escape(args.site_description),
        year=str(dt.datetime.now().year),
        extra_head=build_feed_head(feed_links()) + extra_head,
        content=content,
        sidebar=sidebar,
    )


def build_link_list(entries: list[dict], empty: str) -> str:
    items = []
    for entry in entries:
        items.append(
            f'<li><a href="{entry["url"]}">{html.escape(entry["name"])}</a>'
            f'<span class="count">{entry["count"]}</span></li>'
        )
    return "\n".join(items) if items else f"<li>{empty}</li>"


def build_blog_sidebar(topics: list[dict], years: list[dict]) -> str:
    feeds = "".join(
        f'<li><a href="{feed["url"]}">{html.escape(feed["name"])}</a></li>' for feed in feed_links()
    )
    return (
        '<div class="panel">'
        "<h3>Topics</h3>"
        f'<ul class="topic-list">{build_link_list(topics, "No topics yet.")}</ul>'
        "</div>"
        '<div class="panel">'
        "<h3>Years</h3>"
        f'<ul class="year-list">{build_link_list(years, "No posts yet.")}</ul>'
        "</div>"
        '<div class="panel">'
        "<h3>Feeds</h3>"
        f'<ul class="feed-list">{feeds}</ul>'
        "</div>"
    )


def build_topic_chips(post: dict, base_dir: str) -> str:
    return " ".join(
        f'<a class="chip" href="{join_path(base_dir, "topic", slug)}">{html.escape(topic)}</a>'
        for topic, slug in zip(post["topics"], post["topics_sanitized"])
    )


def build_post_cards(posts: list[dict], base_dir: str) -> str:
    cards = []
    for post in posts:
        url = join_path(base_dir, post["url"] or "")
        title = html.escape(post["title"] or "")
        snippet = html.escape(post["snippet"] or "")
        cards.append(
            '<article class="post-card">'
            '<div class="post-meta">'
            f'<span class="post-date">{display_date(post["published"])}</span>'
            f'<div class="post-tags">{build_topic_chips(post, base_dir)}</div></div>'
            f'<h2 class="post-title"><a href="{url}">{title}</a></h2>'
            f'<p class="post-summary">{snippet}</p>'
            f'<a class="post-more" href="{url}">Read more</a>'
            "</article>"
        )
    return "\n".join(cards)


def build_pagination(page: int, total_pages: int, page_url: Callable[[int], str]) -> str:
    if total_pages <= 1:
        return ""
    items = []
    if page > 1:
        items.append(f'<a class="page-link" href="{page_url(page - 1)}">Previous</a>')
    else:
        items.append('<span class="page-link is-disabled">Previous</span>')
    numbers = []
    for num in range(1, total_pages + 1):
        if num == page:
            numbers.append(f'<span class="page-number is-active">{num}</span>')
        else:
            numbers.append(f'<a class="page-number" href="{page_url(num)}">{num}</a>')
    items.append(f'<div class="page-numbers">{"".join(numbers)}</div>')
    if page < total_pages:
        items.append(f'<a class="page-link" href="{page_url(page + 1)}">Next</a>')
    else:
        items.append('<span class="page-link is-disabled">Next</span>')
    return f'<nav class="pagination">{"".join(items)}</nav>'


def write_overview_pages(
    base_template: str,
    output_dir: Path,
    pages: list[dict],
    root_url: str,
    heading: str,
    intro: str,
    sidebar: str,
    args: object,
) -> int:
    """Write each page to ``<root_url>/page/<n>/`` and page 1 also to ``<root_url>/``."""

    def page_url(page: int) -> str:
        return join_path(root_url, "page", str(page))

    for page in pages:
        number = page["page"]
        content = (
            '<div class="section-head">'
            f"<h2>{html.escape(heading)}</h2>"
            f"<p>{html.escape(intro)}</p>"
            "</div>"
            f'<div class="post-grid">{build_post_cards(page["items"], args.base_dir)}</div>'
            f'{build_pagination(number, page["total_pages"], page_url)}'
        )
        title = f"{heading} | {args.site_name}"
        if number > 1:
            title = f"{heading} | Page {number} | {args.site_name}"
        html_doc = render_page(base_template, args, title, content, sidebar)
        if number == 1:
            write_text(output_path(output_dir, root_url), html_doc, args.verbose)
        write_text(output_path(output_dir, page_url(number)), html_doc, args.verbose)
    return len(pages)


def build_blog_posts(base_template: str, output_dir: Path, index: BlogIndex, args: object, sidebar: str) -> None:
    for post in index.posts:
        url = join_path(args.base_dir, post["url"] or "")
        snippet = post["snippet"] or ""
        content = (
            '<article class="post">'
            '<div class="post-meta">'
            f'<span class="post-date">{display_date(post["published"])}</span>'
            f'<span class="post-author">{html.escape(post["author"] or "")}</span>'
            f'<div class="post-tags">{build_topic_chips(post, args.base_dir)}</div></div>'
            f'<h1 class="post-title">{html.escape(post["title"] or "")}</h1>'
            f'<div class="post-body">{post["html"]}</div>'
            f'<div class="post-footer"><a href="{join_path(args.base_dir)}">Back to blog</a></div>'
            "</article>"
        )
        extra_head = f'<meta name="description" content="{html.escape(snippet)}" />'
        html_doc = render_page(
            base_template, args, f"{post['title'] or ''} | {args.site_name}", content, sidebar, extra_head
        )
        write_text(output_path(output_dir, url), html_doc, args.verbose)


def build_overview(base_template: str, output_dir: Path, index: BlogIndex, args: object, sidebar: str) -> int:
    pages = paginate(index.posts, args.posts_per_page)
    return write_overview_pages(
        base_template,
        output_dir,
        pages,
        join_path(args.base_dir),
        "Blog",
        "All posts, newest first.",
        sidebar,
        args,
    )


def build_topic_overviews(base_template: str, output_dir: Path, index: BlogIndex, args: object, sidebar: str) -> None:
    for topic, indices in index.topics.items():
        posts = list(reversed(index.posts_for(indices)))
        pages = paginate(posts, args.posts_per_page, reverse_pages=False)
        write_overview_pages(
            base_template,
            output_dir,
            pages,
            join_path(args.base_dir, "topic", sanitize_string(topic)),
            topic,
            f"Posts about {topic}.",
            sidebar,
            args,
        )


def build_year_overviews(base_template: str, output_dir: Path, index: BlogIndex, args: object, sidebar: str) -> None:
    for year, indices in index.years.items():
        posts = list(reversed(index.posts_for(indices)))
        pages = paginate(posts, args.posts_per_page, reverse_pages=False)
        write_overview_pages(
            base_template,
            output_dir,
            pages,
            join_path(args.base_dir, "year", str(year)),
            str(year),
            f"Posts published in {year}.",
            sidebar,
            args,
        )


def build_blog_feed(output_dir: Path, index: BlogIndex, args: object) -> None:
    entries = build_feed_entries(index.posts, args.site_url, args.base_dir)
    meta = {
        "site_url": args.site_url,
        "base_dir": args.base_dir,
        "title": args.feed_title,
        "description": args.feed_description,
        "author": args.site_name,
    }
    write_text(output_path(output_dir, "feeds", "blog.atom"), render_atom(entries, meta), args.verbose)


def build_blog(base_template: str, output_dir: Path, index: BlogIndex, args: object) -> None:
    sidebar = build_blog_sidebar(index.sorted_topics(args.base_dir), index.sorted_years(args.base_dir))
    build_blog_posts(base_template, output_dir, index, args, sidebar)
    build_overview(base_template, output_dir, index, args, sidebar)
    build_topic_overviews(base_template, output_dir, index, args, sidebar)
    build_year_overviews(base_template, output_dir, index, args, sidebar)
    build_blog_feed(output_dir, index, args)


def shot_path(shot: dict, gallery_path: str) -> str:
    url = (shot["url"] or "").strip("/")
    if url:
        return join_path(url)
    return join_path(gallery_path, sanitize_string(shot["title"]))


def build_thumbnails(shots: list[dict], gallery_path: str, current: Optional[dict] = None) -> str:
    items = []
    for shot in shots:
        active = " is-active" if shot is current else ""
        items.append(
            f'<li class="shot{active}"><a href="{shot_path(shot, gallery_path)}">'
            f'<img src="{html.escape(shot["image_min"])}" alt="{html.escape(shot["title"])}" loading="lazy" />'
            f"<span>{html.escape(shot['title'])}</span></a></li>"
        )
    return f'<ul class="shot-grid">{"".join(items)}</ul>'


def build_galleries(base_template: str, output_dir: Path, galleries: GalleryIndex, args: object) -> None:
    for title, shots in galleries.galleries.items():
        name = str(title or "")
        gallery_path = galleries.gallery_path(title)
        content = (
            '<div class="section-head">'
            f"<h2>{html.escape(name)}</h2>"
            "</div>"
            f"{build_thumbnails(shots, gallery_path)}"
        )
        html_doc = render_page(base_template, args, f"{name} | {args.site_name}", content)
        write_text(output_path(output_dir, gallery_path), html_doc, args.verbose)

        for shot in shots:
            content = (
                '<article class="screenshot">'
                f'<h1 class="post-title">{html.escape(shot["title"])}</h1>'
                f'<a href="{html.escape(shot["image_big"])}">'
                f'<img class="screenshot-image" src="{html.escape(shot["image_big"])}" '
                f'alt="{html.escape(shot["title"])}" /></a>'
                f'<div class="post-footer"><a href="{join_path(gallery_path)}">Back to {html.escape(name)}</a></div>'
                "</article>"
                f"{build_thumbnails(shots, gallery_path, current=shot)}"
            )
            html_doc = render_page(base_template, args, f"{shot['title']} | {args.site_name}", content)
            write_text(output_path(output_dir, shot_path(shot, gallery_path)), html_doc, args.verbose)


def build_markdown_page(base_template: str, output_dir: Path, source: Path, url_path: str, args: object) -> None:
    page = parse_blog_post(source.read_text(encoding="utf-8"))
    title = page["title"] or source.stem
    content = (
        '<article class="post">'
        f'<h1 class="post-title">{html.escape(title)}</h1>'
        f'<div class="post-body">{page["html"]}</div>'
        "</article>"
    )
    html_doc = render_page(base_template, args, f"{title} | {args.site_name}", content)
    write_text(output_path(output_dir, url_path), html_doc, args.verbose)


def build_error_page(base_template: str, output_dir: Path, code: str, message: str, args: object) -> None:
    content = (
        '<div class="section-head">'
        f"<h2>{code}</h2>"
        f"<p>{html.escape(message)}</p>"
        "</div>"
        '<div class="post-card">'
        '<a class="post-more" href="/">Back to home</a>'
        "</div>"
    )
    html_doc = render_page(base_template, args, f"{code} | {args.site_name}", content)
    write_text(output_dir / f"{code}.html", html_doc, args.verbose)


def build_core_pages(base_template: str, output_dir: Path, pages_dir: Path, args: object) -> None:
    build_error_page(base_template, output_dir, "404", "Page not found.", args)
    build_error_page(base_template, output_dir, "500", "Something went wrong on our side.", args)
    available = {path.name: path for path in list_input_files(pages_dir, ".md")}
    for filename, url_path in CORE_PAGES:
        source = available.get(filename)
        if source is None:
            print(f"Core page not found: {pages_dir / filename}", file=sys.stderr)
            continue
        build_markdown_page(base_template, output_dir, source, url_path, args)


def build_root_index(
    base_template: str, output_dir: Path, index: BlogIndex, galleries: GalleryIndex, args: object
) -> None:
    num_posts = min(len(index.posts), max(0, args.home_posts))
    latest = list(reversed(index.posts[len(index.posts) - num_posts :])) if num_posts else []
    shots = galleries.find(args.home_gallery) or []
    shots = shots[: max(0, args.home_screenshots)]

    sections = [
        '<div class="section-head">'
        "<h2>Latest posts</h2>"
        "</div>"
        f'<div class="post-grid">{build_post_cards(latest, args.base_dir)}</div>'
        f'<a class="post-more" href="{join_path(args.base_dir)}">All posts</a>'
    ]
    if shots:
        gallery_path = galleries.gallery_path(shots[0]["gallery"])
        sections.append(
            '<div class="section-head">'
            f"<h2>{html.escape(str(shots[0]['gallery'] or ''))}</h2>"
            "</div>"
            f"{build_thumbnails(shots, gallery_path)}"
            f'<a class="post-more" href="{join_path(gallery_path)}">All screenshots</a>'
        )
    html_doc = render_page(base_template, args, args.site_name, "".join(sections))
    write_text(output_dir / "index.html", html_doc, args.verbose)
