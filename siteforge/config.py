from __future__ import annotations

import json
import sys
from pathlib import Path

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

DEFAULTS = {
    "posts": "blog-posts",
    "screenshots": "screenshots",
    "pages": "pages",
    "static": "static",
    "static_root": "static_root",
    "templates": "templates",
    "output": "output",
    "base_dir": "/blog",
    "posts_per_page": 30,
    "site_url": "https://www.luflow.net/",
    "site_name": "luflow.net",
    "site_description": "Free software with a special focus on graphics engines.",
    "feed_title": "luflow.net Blog",
    "feed_description": "This blog is dedicated to free software in general with a special focus on graphics engines.",
    "home_gallery": "hfge-screenshots",
    "home_posts": 3,
    "home_screenshots": 6,
    "clean": True,
    "verbose": False,
}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data
