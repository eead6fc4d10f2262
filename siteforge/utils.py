from __future__ import annotations

import datetime as dt
import shutil
import sys
from pathlib import Path
from typing import Optional

DISPLAY_DATE_FMT = "%a %b %d %Y"


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def join_path(*parts: str) -> str:
    """Join URL path segments into an absolute directory path ending in ``/``."""
    segments = [segment for part in parts for segment in str(part).split("/") if segment]
    if not segments:
        return "/"
    return "/" + "/".join(segments) + "/"


def iso_date(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def display_date(value: Optional[dt.datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(DISPLAY_DATE_FMT)


def prepare_output_dir(output_dir: Path, project_root: Path, clean: bool = True) -> None:
    """Create ``output_dir``, removing a previous build first when ``clean``."""
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if clean and output_dir.exists():
        if output_resolved == root_resolved:
            print("Refusing to clean project root.", file=sys.stderr)
            sys.exit(1)
        if not output_resolved.is_relative_to(root_resolved):
            print("Refusing to clean output directory outside project root.", file=sys.stderr)
            sys.exit(1)
        shutil.rmtree(output_dir)
        print(f"Removed output dir: {output_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)
