#!/usr/bin/env python3
"""Fetch a web page and aggregate its style text for design token extraction.

The aggregate is the concatenation of every <style> body, every inline
style="..." attribute (each terminated by ';'), the :root variable block of
each <style>, and, when the page carries little inline CSS, up to three linked
stylesheets.

Usage:
    python scripts/collect-styles.py --url https://example.com --output styles.css
    python scripts/collect-styles.py --url https://example.com --output styles.css --render
    python scripts/collect-styles.py --url https://example.com > styles.css

Without --output the aggregate is written to stdout and progress goes to stderr.
"""

import argparse
import contextlib
import re
import sys
from pathlib import Path
from urllib.parse import urljoin, urlparse

try:
    import requests
except ImportError:
    print("Error: requests is required. Install with: pip install requests")
    sys.exit(1)

try:
    from bs4 import BeautifulSoup
except ImportError:
    print("Error: beautifulsoup4 is required. Install with: pip install beautifulsoup4")
    sys.exit(1)


# Below this many characters of inline CSS, linked stylesheets are fetched too
MIN_INLINE_STYLES = 500

MAX_EXTERNAL_STYLESHEETS = 3

# Responses shorter than this are treated as empty or blocked
MIN_PAGE_LENGTH = 100

HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

ROOT_BLOCK_PATTERN = re.compile(r':root\s*\{([^}]+)\}')


def is_valid_url(url):
    """Accept only absolute http(s) URLs."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def fetch_url(url, timeout=15):
    """Fetch URL content with error handling."""
    try:
        resp = requests.get(url, headers=HEADERS, timeout=timeout)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as e:
        print(f"  Warning: Could not fetch {url}: {e}")
        return None


def fetch_rendered(url, timeout=15):
    """Load the page in headless Chromium so JS-generated styles are present."""
    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        print("Warning: playwright not installed, falling back to a plain fetch")
        print("  Install with: pip install playwright && playwright install")
        return None

    with sync_playwright() as p:
        browser = None
        try:
            browser = p.chromium.launch(headless=True)
            page = browser.new_page(viewport={"width": 1280, "height": 720})
            page.goto(url, wait_until="networkidle", timeout=timeout * 1000)
            return page.content()
        except Exception as e:
            print(f"  Warning: Could not render {url}: {e}")
            return None
        finally:
            if browser is not None:
                browser.close()


def style_tag_text(soup):
    return "".join((tag.string or tag.get_text()) + "\n" for tag in soup.find_all("style"))


def inline_style_text(soup):
    return "".join(tag["style"] + ";" for tag in soup.find_all(style=True))


def root_variable_text(soup):
    """Re-emit the first :root block of each <style> tag."""
    blocks = []
    for tag in soup.find_all("style"):
        match = ROOT_BLOCK_PATTERN.search(tag.string or tag.get_text())
        if match:
            blocks.append(":root {" + match.group(1) + "}\n")
    return "".join(blocks)


def stylesheet_urls(soup, base_url, limit=MAX_EXTERNAL_STYLESHEETS):
    urls = []
    for link in soup.find_all("link", rel="stylesheet"):
        href = link.get("href")
        if href:
            urls.append(urljoin(base_url, href))
    return urls[:limit]


def aggregate_styles(html, base_url, fetch=fetch_url):
    """Concatenate all style text reachable from a page's HTML."""
    soup = BeautifulSoup(html, "html.parser")

    styles = style_tag_text(soup)
    styles += inline_style_text(soup)
    styles += root_variable_text(soup)

    if len(styles) < MIN_INLINE_STYLES:
        for css_url in stylesheet_urls(soup, base_url):
            print(f"  -> Fetching stylesheet: {css_url}")
            css = fetch(css_url)
            if css:
                styles += css + "\n"

    return styles


def collect_styles(url, render=False, timeout=15):
    """Fetch a page and return its aggregated style text, or None on failure."""
    html = fetch_rendered(url, timeout) if render else None
    if html is None:
        html = fetch_url(url, timeout)

    if not html or len(html) < MIN_PAGE_LENGTH:
        print("Error: Received empty or invalid response from website")
        return None

    return aggregate_styles(html, url, fetch=lambda u: fetch_url(u, timeout))


def main():
    parser = argparse.ArgumentParser(
        description="Fetch a web page and aggregate its inline, attribute and linked style text."
    )
    parser.add_argument(
        "--url", required=True, help="Page URL to collect styles from"
    )
    parser.add_argument(
        "--output", help="Output path for the aggregated style text (default: stdout)"
    )
    parser.add_argument(
        "--render", action="store_true",
        help="Render the page with Playwright first, to capture JavaScript-generated styles"
    )
    parser.add_argument(
        "--timeout", type=int, default=15, help="Per-request timeout in seconds (default: 15)"
    )
    args = parser.parse_args()

    if not is_valid_url(args.url):
        print(f"Error: Please enter a valid URL (e.g., https://example.com): {args.url}")
        sys.exit(1)

    # Keep stdout clean for the aggregate when no output file is given
    progress = sys.stdout if args.output else sys.stderr
    with contextlib.redirect_stdout(progress):
        print(f"Fetching page: {args.url}")
        styles = collect_styles(args.url, render=args.render, timeout=args.timeout)
    if styles is None:
        sys.exit(1)

    if not args.output:
        sys.stdout.write(styles)
        print(f"\nCollected {len(styles)} characters of style text", file=sys.stderr)
        return

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(styles, encoding="utf-8")
    print(f"\nCollected {len(styles)} characters of style text")
    print(f"Styles saved to: {output_path}")
    print("\nDone.")


if __name__ == "__main__":
    main()
