from __future__ import annotations

import sys
from typing import Optional

from .content import sanitize_string
from .utils import join_path


def sort_by_name(entries: list[dict]) -> list[dict]:
    return sorted(entries, key=lambda entry: entry["name"].upper())


class BlogIndex:
    """Parsed posts in input order, with topic and year lookups by position."""

    def __init__(self) -> None:
        self.posts: list[dict] = []
        self.topics: dict[str, list[int]] = {}
        self.years: dict[int, list[int]] = {}

    def __len__(self) -> int:
        return len(self.posts)

    def add(self, post: dict) -> int:
        post_id = len(self.posts)
        for topic in post["topics"]:
            self.topics.setdefault(topic, []).append(post_id)
        published = post.get("published")
        if published is not None:
            self.years.setdefault(published.year, []).append(post_id)
        else:
            print(
                f"Post without a valid published date is not listed by year: {post.get('source') or post.get('title')}",
                file=sys.stderr,
            )
        self.posts.append(post)
        return post_id

    def posts_for(self, indices: list[int]) -> list[dict]:
        return [self.posts[post_id] for post_id in indices]

    def sorted_topics(self, base_dir: str) -> list[dict]:
        topics = []
        for name, indices in self.topics.items():
            topics.append(
                {
                    "name": name,
                    "url": join_path(base_dir, "topic", sanitize_string(name)),
                    "count": len(indices),
                }
            )
        return sort_by_name(topics)

    def sorted_years(self, base_dir: str) -> list[dict]:
        years = []
        for year, indices in self.years.items():
            name = str(year)
            years.append({"name": name, "url": join_path(base_dir, "year", name), "count": len(indices)})
        return sort_by_name(years)


class GalleryIndex:
    """Screenshots grouped by gallery title, with each gallery's base path."""

    def __init__(self) -> None:
        self.galleries: dict[Optional[str], list[dict]] = {}
        self.dirs: dict[Optional[str], Optional[str]] = {}

    def __len__(self) -> int:
        return sum(len(shots) for shots in self.galleries.values())

    def add(self, title: Optional[str], url: Optional[str], shot: dict) -> None:
        shots = self.galleries.get(title)
        if shots is None:
            self.galleries[title] = [shot]
            self.dirs[title] = url
        else:
            shots.append(shot)

    def find(self, slug: str) -> Optional[list[dict]]:
        for title, shots in self.galleries.items():
            if sanitize_string(str(title)) == slug:
                return shots
        return None

    def gallery_path(self, title: Optional[str]) -> str:
        base = (self.dirs.get(title) or "").strip("/")
        if base:
            return base
        return sanitize_string(str(title))
