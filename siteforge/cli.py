from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Callable

from .config import DEFAULTS, load_config
from .content import list_input_files, parse_screenshot_files, read_blog_post
from .index import BlogIndex, GalleryIndex
from .pages import build_blog, build_core_pages, build_galleries, build_root_index
from .render import copy_static, read_template
from .utils import parse_bool, parse_int, prepare_output_dir


def run_phase(name: str, func: Callable[[], None]) -> bool:
    """Run one generation phase; I/O failures are reported and do not stop later phases."""
    try:
        func()
    except (OSError, UnicodeDecodeError) as exc:
        print(f"{name} failed: {exc}", file=sys.stderr)
        return False
    print(f"{name} done.")
    return True


def parse_blog_posts(posts_dir: Path) -> BlogIndex:
    index = BlogIndex()
    for md_file in list_input_files(posts_dir, ".md"):
        index.add(read_blog_post(md_file))
    return index


def parse_screenshots(screenshots_dir: Path) -> GalleryIndex:
    galleries = GalleryIndex()
    parse_screenshot_files(screenshots_dir, galleries)
    return galleries


def build_site(args: argparse.Namespace) -> dict:
    output_dir = Path(args.output)
    templates_dir = Path(args.templates)
    project_root = Path.cwd()
    args.verbose = parse_bool(getattr(args, "verbose", False))

    if not templates_dir.exists():
        print(f"Templates directory not found: {templates_dir}", file=sys.stderr)
        sys.exit(1)
    base_template = read_template(templates_dir / "base.html")

    prepare_output_dir(output_dir, project_root, parse_bool(args.clean))

    results = {}
    state: dict = {"index": None, "galleries": None}

    def copy_static_files() -> None:
        copy_static(Path(args.static), output_dir / "static")

    def copy_static_root_files() -> None:
        copy_static(Path(args.static_root), output_dir)

    def generate_core() -> None:
        build_core_pages(base_template, output_dir, Path(args.pages), args)

    def generate_blog() -> None:
        index = parse_blog_posts(Path(args.posts))
        print(f"Blog: parsed {len(index)} posts.")
        state["index"] = index
        build_blog(base_template, output_dir, index, args)

    def generate_screenshots() -> None:
        galleries = parse_screenshots(Path(args.screenshots))
        print(f"Screenshots: parsed {len(galleries)} screenshots in {len(galleries.galleries)} galleries.")
        state["galleries"] = galleries
        build_galleries(base_template, output_dir, galleries, args)

    def generate_root_index() -> None:
        index = state["index"] or BlogIndex()
        galleries = state["galleries"] or GalleryIndex()
        build_root_index(base_template, output_dir, index, galleries, args)

    results["static"] = run_phase("Static copy", copy_static_files)
    results["static_root"] = run_phase("Static root copy", copy_static_root_files)
    results["core"] = run_phase("Core generation", generate_core)
    results["blog"] = run_phase("Blog generation", generate_blog)
    results["screenshots"] = run_phase("Screenshots generation", generate_screenshots)
    results["index"] = run_phase("Root index generation", generate_root_index)
    return results


def main() -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args()
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str) -> object:
        value = config.get(key)
        return DEFAULTS[key] if value is None else value

    def cfg_str(key: str) -> str:
        return str(cfg_value(key))

    def cfg_bool(key: str) -> bool:
        return parse_bool(cfg_value(key))

    def cfg_int(key: str) -> int:
        return parse_int(cfg_value(key), DEFAULTS[key])

    parser = argparse.ArgumentParser(description="Static site generator for a blog and screenshot galleries.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--posts", default=cfg_str("posts"), help="Directory containing Markdown blog posts.")
    parser.add_argument(
        "--screenshots",
        default=cfg_str("screenshots"),
        help="Directory containing screenshot descriptor files.",
    )
    parser.add_argument("--pages", default=cfg_str("pages"), help="Directory containing core page Markdown files.")
    parser.add_argument("--static", default=cfg_str("static"), help="Directory copied to <output>/static.")
    parser.add_argument(
        "--static-root",
        default=cfg_str("static_root"),
        help="Directory copied to the output root.",
    )
    parser.add_argument("--templates", default=cfg_str("templates"), help="Directory containing base.html.")
    parser.add_argument("--output", default=cfg_str("output"), help="Output directory for the site.")
    parser.add_argument("--base-dir", default=cfg_str("base_dir"), help="URL path of the blog section.")
    parser.add_argument(
        "--posts-per-page",
        default=cfg_int("posts_per_page"),
        type=int,
        help="Number of post previews per overview page.",
    )
    parser.add_argument("--site-url", default=cfg_str("site_url"), help="Public site URL used for the feed.")
    parser.add_argument("--site-name", default=cfg_str("site_name"), help="Site title.")
    parser.add_argument("--site-description", default=cfg_str("site_description"), help="Site description.")
    parser.add_argument("--feed-title", default=cfg_str("feed_title"), help="Atom feed title.")
    parser.add_argument("--feed-description", default=cfg_str("feed_description"), help="Atom feed subtitle.")
    parser.add_argument(
        "--home-gallery",
        default=cfg_str("home_gallery"),
        help="Sanitized title of the gallery shown on the home page.",
    )
    parser.add_argument(
        "--home-posts",
        default=cfg_int("home_posts"),
        type=int,
        help="Number of latest posts shown on the home page.",
    )
    parser.add_argument(
        "--home-screenshots",
        default=cfg_int("home_screenshots"),
        type=int,
        help="Number of screenshots shown on the home page.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean"),
        help="Remove the output directory before building.",
    )
    parser.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("verbose"),
        help="Print every written file.",
    )
    args = parser.parse_args()
    start = time.perf_counter()
    build_site(args)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output}")
