import argparse
import datetime as dt

import pytest

from siteforge.config import DEFAULTS
from siteforge.content import sanitize_string


def make_post(title, published=None, topics=(), **extra):
    post = {
        "author": "luflow",
        "published": published,
        "updated": None,
        "topics": list(topics),
        "topics_sanitized": [sanitize_string(topic) for topic in topics],
        "topics_comma_sep": ", ".join(topics),
        "title": title,
        "snippet": f"About {title}",
        "url": sanitize_string(title),
        "markdown": "",
        "html": f"<p>{title}</p>",
    }
    post.update(extra)
    return post


@pytest.fixture
def post_factory():
    return make_post


@pytest.fixture
def site_args():
    args = argparse.Namespace(**DEFAULTS)
    args.clean = True
    args.verbose = False
    return args


@pytest.fixture
def may_first():
    return dt.datetime(2021, 5, 1)
