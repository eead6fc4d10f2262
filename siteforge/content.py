from __future__ import annotations

import datetime as dt
import re
import sys
from pathlib import Path
from typing import Optional

import markdown

WHITESPACE_RE = re.compile(r"\s+")
# characters [].:/ are reserved in output paths
UNSUPPORTED_RE = re.compile(r"[\[\]\.:/]")
LINE_SPLIT_RE = re.compile(r"\r?\n")

BODY_DELIMITER = "---"
POST_FIELDS = ("author", "published", "updated", "topics", "title", "snippet")
SCREENSHOT_FIELDS = ("title", "imageMin", "imageBig", "url")
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a %b %d %Y",
)


def sanitize_string(text: str) -> str:
    text = WHITESPACE_RE.sub("-", text)
    text = UNSUPPORTED_RE.sub("", text)
    return text.lower()


def split_lines(text: str) -> list[str]:
    return LINE_SPLIT_RE.split(text.lstrip("\ufeff"))


def field_value(line: str) -> str:
    if ":" not in line:
        return ""
    return line.split(":", 1)[1].strip()


def match_field(line: str, fields: tuple[str, ...]) -> Optional[str]:
    for name in fields:
        if line[: len(name)] == name:
            return name
    return None


def parse_date(value: str) -> Optional[dt.datetime]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return dt.datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_topics(value: str) -> list[str]:
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def new_post() -> dict:
    return {
        "author": None,
        "published": None,
        "updated": None,
        "topics": [],
        "topics_sanitized": [],
        "topics_comma_sep": None,
        "title": None,
        "snippet": None,
        "url": None,
        "markdown": "",
        "html": "",
    }


def parse_blog_post(text: str) -> dict:
    """Parse a blog post: header lines up to ``---``, markdown after it.

    Header fields are recognized by prefix, the value being everything after
    the first colon. Missing fields stay ``None``.
    """
    post = new_post()
    body_parts: list[str] = []
    body_found = False
    for line in split_lines(text):
        if body_found:
            body_parts.append("\n")
            body_parts.append(line)
            continue
        if line == BODY_DELIMITER:
            body_found = True
            continue
        name = match_field(line, POST_FIELDS)
        if name is None:
            continue
        value = field_value(line)
        if name in {"published", "updated"}:
            post[name] = parse_date(value)
        elif name == "topics":
            topics = [topic for topic in parse_topics(value) if topic not in post["topics"]]
            post["topics_comma_sep"] = ", ".join(filter(None, [post["topics_comma_sep"], value]))
            post["topics"].extend(topics)
            post["topics_sanitized"].extend(sanitize_string(topic) for topic in topics)
        elif name == "title":
            post["title"] = value
            post["url"] = sanitize_string(value)
        else:
            post[name] = value

    post["markdown"] = "".join(body_parts)
    md = markdown.Markdown(extensions=["fenced_code", "tables"])
    post["html"] = md.convert(post["markdown"])
    return post


def read_blog_post(path: Path) -> dict:
    post = parse_blog_post(path.read_text(encoding="utf-8"))
    post["source"] = path.name
    return post


def list_input_files(input_dir: Path, suffix: str = "") -> list[Path]:
    files = []
    for path in sorted(input_dir.iterdir(), key=lambda p: p.name):
        if not path.is_file() or path.name.startswith("."):
            continue
        if suffix and path.suffix.lower() != suffix:
            continue
        files.append(path)
    return files


def parse_screenshot_text(text: str, galleries, header: Optional[dict] = None) -> int:
    """Feed screenshot records of one descriptor file into ``galleries``.

    A record is flushed once title, imageMin, imageBig and url are all set;
    the four fields then reset for the next record. ``header`` holds the
    current gallery title and base path and is updated in place, so a
    following file without its own header continues the same gallery.
    Records seen before any gallery title are skipped. Returns the number
    of records added.
    """
    if header is None:
        header = {"title": None, "url": None}
    record: dict = dict.fromkeys(SCREENSHOT_FIELDS)
    added = 0
    for line in split_lines(text):
        if line[:16] == "screenshotsTitle":
            header["title"] = field_value(line)
        elif line[:14] == "screenshotsURL":
            header["url"] = field_value(line)
        else:
            name = match_field(line, SCREENSHOT_FIELDS)
            if name is not None:
                record[name] = field_value(line)

        if all(record[name] for name in SCREENSHOT_FIELDS):
            if header["title"]:
                shot = {
                    "title": record["title"],
                    "image_min": record["imageMin"],
                    "image_big": record["imageBig"],
                    "url": record["url"],
                    "gallery": header["title"],
                    "gallery_url": header["url"],
                }
                galleries.add(header["title"], header["url"], shot)
                added += 1
            else:
                print(f"Screenshot without screenshotsTitle skipped: {record['title']}", file=sys.stderr)
            record = dict.fromkeys(SCREENSHOT_FIELDS)
    return added


def parse_screenshot_files(input_dir: Path, galleries) -> int:
    header: dict = {"title": None, "url": None}
    added = 0
    for path in list_input_files(input_dir):
        added += parse_screenshot_text(path.read_text(encoding="utf-8"), galleries, header)
    return added
