"""End-to-end tests for the site build and its independent phases."""

import shutil

import pytest

from siteforge.cli import build_site, run_phase
from siteforge.pages import output_path

BASE = "<html><head><title>{{title}}</title>{{extra_head}}</head><body>{{content}}<aside>{{sidebar}}</aside></body></html>"

POSTS = {
    "2021-05-01-hello.md": (
        "author: luflow\npublished: 2021-05-01\nupdated: 2021-05-01\n"
        "topics: Graphics, Free Software\ntitle: Hello World\nsnippet: First.\n---\nHello *there*.\n"
    ),
    "2022-01-15-update.md": (
        "author: luflow\npublished: 2022-01-15\nupdated: 2022-01-20\n"
        "topics: Graphics\ntitle: Engine Update\nsnippet: Second.\n---\nNews.\n"
    ),
}

SHOTS = (
    "screenshotsTitle: HFGE Screenshots\nscreenshotsURL: /projects/hfge/screenshots\n"
    "title: Sponza\nimageMin: /img/sponza_min.png\nimageBig: /img/sponza.png\n"
    "url: /projects/hfge/screenshots/sponza\n"
    "title: Shadows\nimageMin: /img/shadows_min.png\nimageBig: /img/shadows.png\n"
    "url: /projects/hfge/screenshots/shadows\n"
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "base.html").write_text(BASE, encoding="utf-8")
    posts = tmp_path / "blog-posts"
    posts.mkdir()
    for name, text in POSTS.items():
        (posts / name).write_text(text, encoding="utf-8")
    (tmp_path / "screenshots").mkdir()
    (tmp_path / "screenshots" / "hfge.txt").write_text(SHOTS, encoding="utf-8")
    (tmp_path / "pages").mkdir()
    (tmp_path / "pages" / "contact.md").write_text("title: Contact\n---\nMail me.\n", encoding="utf-8")
    (tmp_path / "pages" / "hfge.md").write_text("title: HFGE\n---\nAn engine.\n", encoding="utf-8")
    (tmp_path / "static" / "css").mkdir(parents=True)
    (tmp_path / "static" / "css" / "style.css").write_text("body {}", encoding="utf-8")
    (tmp_path / "static_root").mkdir()
    (tmp_path / "static_root" / "robots.txt").write_text("User-agent: *", encoding="utf-8")
    return tmp_path


class TestBuildSite:
    def test_all_phases_succeed(self, project, site_args):
        results = build_site(site_args)
        assert results == {"static": True, "static_root": True, "core": True, "blog": True, "screenshots": True, "index": True}

    def test_blog_layout(self, project, site_args):
        build_site(site_args)
        out = project / "output" / "blog"
        assert (out / "hello-world" / "index.html").exists()
        assert (out / "engine-update" / "index.html").exists()
        assert (out / "topic" / "graphics" / "index.html").exists()
        assert (out / "topic" / "free-software" / "page" / "1" / "index.html").exists()
        assert (out / "year" / "2021" / "index.html").exists()
        assert (out / "year" / "2022" / "page" / "1" / "index.html").exists()
        assert not (out / "year" / "2021" / "page" / "2").exists()

    def test_first_overview_page_written_twice(self, project, site_args):
        build_site(site_args)
        out = project / "output" / "blog"
        root = (out / "index.html").read_text(encoding="utf-8")
        assert root == (out / "page" / "1" / "index.html").read_text(encoding="utf-8")
        assert root.index("Engine Update") < root.index("Hello World")

    def test_overview_pagination(self, project, site_args):
        site_args.posts_per_page = 1
        build_site(site_args)
        out = project / "output" / "blog"
        assert "Hello World" in (out / "page" / "1" / "index.html").read_text(encoding="utf-8")
        page_two = (out / "page" / "2" / "index.html").read_text(encoding="utf-8")
        assert "Engine Update" in page_two
        assert 'href="/blog/page/1/"' in page_two
        graphics = (out / "topic" / "graphics" / "page" / "1" / "index.html").read_text(encoding="utf-8")
        assert "Engine Update" in graphics

    def test_post_page_content(self, project, site_args):
        build_site(site_args)
        page = (project / "output" / "blog" / "hello-world" / "index.html").read_text(encoding="utf-8")
        assert "<em>there</em>" in page
        assert 'href="/blog/topic/free-software/"' in page
        assert "Sat May 01 2021" in page
        assert 'href="/feeds/blog.atom"' in page

    def test_feed(self, project, site_args):
        build_site(site_args)
        atom = (project / "output" / "feeds" / "blog.atom").read_text(encoding="utf-8")
        assert atom.index("Engine Update") < atom.index("Hello World")
        assert "https://www.luflow.net/blog/hello-world/" in atom

    def test_screenshots(self, project, site_args):
        build_site(site_args)
        out = project / "output" / "projects" / "hfge" / "screenshots"
        gallery = (out / "index.html").read_text(encoding="utf-8")
        assert "Sponza" in gallery and "Shadows" in gallery
        assert (out / "sponza" / "index.html").exists()
        shot = (out / "shadows" / "index.html").read_text(encoding="utf-8")
        assert 'src="/img/shadows.png"' in shot

    def test_core_pages_and_static(self, project, site_args):
        build_site(site_args)
        out = project / "output"
        for path in ["404.html", "500.html", "contact/index.html", "projects/hfge/index.html"]:
            assert (out / path).exists(), path
        assert (out / "static" / "css" / "style.css").exists()
        assert (out / "robots.txt").exists()

    def test_root_index(self, project, site_args):
        site_args.home_posts = 1
        site_args.home_screenshots = 1
        build_site(site_args)
        index = (project / "output" / "index.html").read_text(encoding="utf-8")
        assert "Engine Update" in index
        assert "Hello World" not in index
        assert "Sponza" in index
        assert "Shadows" not in index

    def test_clean_removes_previous_output(self, project, site_args):
        stale = project / "output" / "stale.html"
        stale.parent.mkdir()
        stale.write_text("old", encoding="utf-8")
        build_site(site_args)
        assert not stale.exists()

    def test_failed_phase_does_not_stop_others(self, project, site_args, capsys):
        site_args.screenshots = "missing-screenshots"
        results = build_site(site_args)
        assert results["screenshots"] is False
        assert results["blog"] is True
        assert results["index"] is True
        assert "Screenshots generation failed" in capsys.readouterr().err
        assert (project / "output" / "blog" / "index.html").exists()

    def test_missing_static_dir_still_copies_static_root(self, project, site_args, capsys):
        shutil.rmtree(project / "static")
        results = build_site(site_args)
        assert results["static"] is False
        assert results["static_root"] is True
        assert (project / "output" / "robots.txt").exists()
        assert "Static copy failed" in capsys.readouterr().err

    def test_verbose_lists_written_files(self, project, site_args, capsys):
        site_args.verbose = True
        build_site(site_args)
        assert "Wrote output/blog/hello-world/index.html" in capsys.readouterr().out.replace("\\", "/")

    def test_quiet_by_default(self, project, site_args, capsys):
        build_site(site_args)
        assert "Wrote " not in capsys.readouterr().out

    def test_shot_url_cannot_escape_output(self, project, site_args):
        (project / "screenshots" / "hfge.txt").write_text(
            "screenshotsTitle: G\nscreenshotsURL: /g\n"
            "title: Sneaky\nimageMin: /m.png\nimageBig: /b.png\nurl: /../../sneaky\n",
            encoding="utf-8",
        )
        build_site(site_args)
        assert not (project / "sneaky").exists()
        assert (project / "output" / "sneaky" / "index.html").exists()

    def test_missing_core_page_is_reported(self, project, site_args, capsys):
        (project / "pages" / "hfge.md").unlink()
        results = build_site(site_args)
        assert results["core"] is True
        assert "Core page not found" in capsys.readouterr().err
        assert (project / "output" / "contact" / "index.html").exists()

    def test_missing_templates_exits(self, project, site_args):
        site_args.templates = "no-templates"
        with pytest.raises(SystemExit):
            build_site(site_args)


class TestRunPhase:
    def test_reports_os_error(self, capsys):
        def fail():
            raise FileNotFoundError("nope")

        assert run_phase("Thing", fail) is False
        assert "Thing failed: nope" in capsys.readouterr().err

    def test_success(self, capsys):
        assert run_phase("Thing", lambda: None) is True
        assert "Thing done." in capsys.readouterr().out


class TestOutputPath:
    def test_joins_url_segments(self, tmp_path):
        assert output_path(tmp_path, "/blog/page/2/") == tmp_path / "blog" / "page" / "2" / "index.html"

    def test_drops_parent_segments(self, tmp_path):
        assert output_path(tmp_path, "/../../x/./y") == tmp_path / "x" / "y" / "index.html"
