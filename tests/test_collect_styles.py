"""Unit tests for scripts/collect-styles.py."""

import importlib.util
import os
import sys
import types

import pytest
import requests


# ---------------------------------------------------------------------------
# Import the script module using importlib (handles hyphenated filename)
# ---------------------------------------------------------------------------

def load_script(name):
    """Load a Python script from the scripts/ directory by filename."""
    path = os.path.join(os.path.dirname(__file__), '..', 'scripts', name)
    path = os.path.abspath(path)
    module_name = name.replace('-', '_').replace('.py', '')
    spec = importlib.util.spec_from_file_location(module_name, path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


cs = load_script('collect-styles.py')


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def no_fetch(url):
    raise AssertionError(f"Unexpected stylesheet fetch: {url}")


# ---------------------------------------------------------------------------
# URL validation tests
# ---------------------------------------------------------------------------

class TestUrlValidation:
    """Tests for http(s) URL acceptance."""

    @pytest.mark.parametrize("url", ["https://example.com", "http://example.com/page?x=1"])
    def test_accepts_http_urls(self, url):
        assert cs.is_valid_url(url) is True

    @pytest.mark.parametrize("url", ["", "example.com", "ftp://example.com", "https://", "javascript:alert(1)"])
    def test_rejects_other_urls(self, url):
        assert cs.is_valid_url(url) is False


# ---------------------------------------------------------------------------
# Fetch tests
# ---------------------------------------------------------------------------

class TestFetchUrl:
    """Tests for the requests wrapper."""

    def test_returns_body_on_success(self, monkeypatch):
        calls = []

        def fake_get(url, headers=None, timeout=None):
            calls.append((url, timeout))
            return FakeResponse("body { color: #333; }")

        monkeypatch.setattr(cs.requests, "get", fake_get)
        assert cs.fetch_url("https://example.com/a.css", timeout=5) == "body { color: #333; }"
        assert calls == [("https://example.com/a.css", 5)]

    def test_returns_none_on_http_error(self, monkeypatch):
        monkeypatch.setattr(cs.requests, "get", lambda url, **kw: FakeResponse("", status_code=404))
        assert cs.fetch_url("https://example.com/missing.css") is None

    def test_returns_none_on_connection_error(self, monkeypatch):
        def fake_get(url, **kw):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(cs.requests, "get", fake_get)
        assert cs.fetch_url("https://example.com") is None


# ---------------------------------------------------------------------------
# Aggregation tests
# ---------------------------------------------------------------------------

class TestAggregateStyles:
    """Tests for assembling the aggregated style text from HTML."""

    def test_includes_style_tags(self, sample_html_inline):
        styles = cs.aggregate_styles(sample_html_inline, "https://example.com/", fetch=no_fetch)
        assert "font-family: 'Lato', sans-serif;" in styles

    def test_includes_inline_attributes_with_separator(self, sample_html_inline):
        styles = cs.aggregate_styles(sample_html_inline, "https://example.com/", fetch=no_fetch)
        assert "color: #0066cc;padding: 12px;" in styles

    def test_repeats_root_block(self, sample_html_inline):
        styles = cs.aggregate_styles(sample_html_inline, "https://example.com/", fetch=no_fetch)
        assert styles.endswith(":root { --accent: #ed247c; }\n")

    def test_skips_linked_sheets_when_inline_css_is_enough(self, sample_html_inline):
        # no_fetch raises if called
        cs.aggregate_styles(sample_html_inline, "https://example.com/", fetch=no_fetch)

    def test_fetches_first_three_linked_sheets(self, sample_html_linked):
        fetched = []

        def fake_fetch(url):
            fetched.append(url)
            return f"/* {url} */ .x {{ color: #123456; }}"

        styles = cs.aggregate_styles(sample_html_linked, "https://example.com/page/", fetch=fake_fetch)
        assert fetched == [
            "https://example.com/css/one.css",
            "https://example.com/page/css/two.css",
            "https://cdn.example.com/three.css",
        ]
        assert styles.count("#123456") == 3

    def test_failed_sheet_is_skipped(self, sample_html_linked):
        def flaky_fetch(url):
            return None if "two" in url else ".ok { margin: 4px; }"

        styles = cs.aggregate_styles(sample_html_linked, "https://example.com/", fetch=flaky_fetch)
        assert styles.count(".ok { margin: 4px; }") == 2

    def test_page_without_styles_is_empty(self):
        html = "<html><head><title>x</title></head><body><p>plain</p></body></html>"
        assert cs.aggregate_styles(html, "https://example.com/", fetch=no_fetch) == ""


class TestCollectStyles:
    """Tests for the fetch-then-aggregate flow."""

    def test_short_response_is_rejected(self, monkeypatch):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: "<html></html>")
        assert cs.collect_styles("https://example.com") is None

    def test_failed_fetch_is_rejected(self, monkeypatch):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: None)
        assert cs.collect_styles("https://example.com") is None

    def test_collects_from_page(self, monkeypatch, sample_html_inline):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: sample_html_inline)
        styles = cs.collect_styles("https://example.com")
        assert "#0066cc" in styles

    def test_render_falls_back_to_plain_fetch(self, monkeypatch, sample_html_inline):
        monkeypatch.setattr(cs, "fetch_rendered", lambda url, timeout=15: None)
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: sample_html_inline)
        styles = cs.collect_styles("https://example.com", render=True)
        assert "Lato" in styles


# ---------------------------------------------------------------------------
# Rendering tests
# ---------------------------------------------------------------------------

class FakeBrowser:
    def __init__(self, fail_goto=False):
        self.fail_goto = fail_goto
        self.closed = False

    def new_page(self, viewport=None):
        browser = self

        class Page:
            def goto(self, url, wait_until=None, timeout=None):
                if browser.fail_goto:
                    raise RuntimeError("navigation timeout")

            def content(self):
                return "<html>rendered</html>"

        return Page()

    def close(self):
        self.closed = True


def install_fake_playwright(monkeypatch, launch):
    """Register a stand-in playwright.sync_api whose chromium.launch calls `launch`."""
    class Session:
        chromium = types.SimpleNamespace(launch=launch)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    sync_api = types.ModuleType("playwright.sync_api")
    sync_api.sync_playwright = Session
    monkeypatch.setitem(sys.modules, "playwright", types.ModuleType("playwright"))
    monkeypatch.setitem(sys.modules, "playwright.sync_api", sync_api)


class TestFetchRendered:
    """Tests for the headless-browser fetch."""

    def test_launch_failure_falls_back(self, monkeypatch, capsys):
        def launch(headless=True):
            raise RuntimeError("Executable doesn't exist")

        install_fake_playwright(monkeypatch, launch)
        assert cs.fetch_rendered("https://example.com") is None
        assert "Could not render" in capsys.readouterr().out

    def test_browser_closed_after_navigation_error(self, monkeypatch):
        browser = FakeBrowser(fail_goto=True)
        install_fake_playwright(monkeypatch, lambda headless=True: browser)
        assert cs.fetch_rendered("https://example.com") is None
        assert browser.closed is True

    def test_returns_rendered_html(self, monkeypatch):
        browser = FakeBrowser()
        install_fake_playwright(monkeypatch, lambda headless=True: browser)
        assert cs.fetch_rendered("https://example.com") == "<html>rendered</html>"
        assert browser.closed is True

    def test_launch_failure_uses_plain_fetch(self, monkeypatch, sample_html_inline):
        def launch(headless=True):
            raise RuntimeError("Executable doesn't exist")

        install_fake_playwright(monkeypatch, launch)
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: sample_html_inline)
        assert "#0066cc" in cs.collect_styles("https://example.com", render=True)


# ---------------------------------------------------------------------------
# CLI tests
# ---------------------------------------------------------------------------

class TestMain:
    """Tests for the command-line entry point."""

    def run_main(self, monkeypatch, *argv):
        monkeypatch.setattr(sys, "argv", ["collect-styles.py", *argv])
        cs.main()

    def test_invalid_url_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            self.run_main(monkeypatch, "--url", "ftp://example.com")
        assert exc.value.code == 1
        assert "Error: Please enter a valid URL" in capsys.readouterr().out

    def test_failed_collection_exits(self, monkeypatch, tmp_path):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: None)
        with pytest.raises(SystemExit) as exc:
            self.run_main(monkeypatch, "--url", "https://example.com", "--output", str(tmp_path / "s.css"))
        assert exc.value.code == 1
        assert not (tmp_path / "s.css").exists()

    def test_writes_output_file(self, monkeypatch, capsys, tmp_path, sample_html_inline):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: sample_html_inline)
        output = tmp_path / "out" / "styles.css"
        self.run_main(monkeypatch, "--url", "https://example.com", "--output", str(output))

        styles = output.read_text(encoding="utf-8")
        assert "#0066cc" in styles
        assert f"Styles saved to: {output}" in capsys.readouterr().out

    def test_without_output_writes_styles_to_stdout(self, monkeypatch, capsys, sample_html_inline):
        monkeypatch.setattr(cs, "fetch_url", lambda url, timeout=15: sample_html_inline)
        self.run_main(monkeypatch, "--url", "https://example.com")

        captured = capsys.readouterr()
        expected = cs.aggregate_styles(sample_html_inline, "https://example.com", fetch=no_fetch)
        assert captured.out == expected
        assert "Fetching page: https://example.com" in captured.err
