"""Pytest configuration and shared fixtures for the design token extractor test suite."""

import pytest


# ---------------------------------------------------------------------------
# Sample CSS fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_css():
    """Aggregated style text with colors, fonts, gradients, spacing, radii and shadows."""
    return """\
:root {
    --brand: #ed247c;
    --ink: #333333;
    --bg: #ffffff;
}

@font-face {
    font-family: "Brand Sans";
    src: url(/fonts/brand-sans.woff2) format("woff2");
}

body {
    font-family: 'Open Sans', Arial, sans-serif;
    color: #333333;
    background-color: #fff;
    margin: 0;
    padding: 0;
}

h1, h2 {
    font-family: "Brand Sans", sans-serif;
    color: #222;
}

.hero {
    background-image: linear-gradient(to right, rgba(237, 36, 124, 0.9), #0066cc);
    padding: 40px 20px;
    border-radius: 8px;
    box-shadow: 0 4px 12px rgba(0, 0, 0, 0.15);
}

.card {
    padding: 16px;
    margin: 10px 0;
    border-radius: 4px;
    box-shadow: none;
    color: hsl(210, 100%, 40%);
}

.btn {
    background-color: #ed247c;
    color: #ffffff;
    padding: 16px;
    border-radius: 50%;
}

.btn:hover {
    background-color: #ED247C;
}

a { color: #0066cc; }
a:hover { color: #004499; }
"""


@pytest.fixture
def sample_css_empty():
    """Empty style text."""
    return ""


@pytest.fixture
def sample_css_no_tokens():
    """Style text with layout rules only: no colors and no fonts."""
    return """\
.grid { display: grid; gap: 1rem; }
.wrap { max-width: 1200px; }
"""


@pytest.fixture
def sample_css_malformed():
    """Truncated and malformed style text that must not break extraction."""
    return """\
body {
    color: #333;
    font-size: 16px
    background: linear-gradient(to right, rgba(0,0,0
}
.broken { color: rgb(300, 20, 20); background: hsl(400, 50%, 50%);
.ok { color: rgb(0, 128, 255)
h1 { font-family: ;
"""


# ---------------------------------------------------------------------------
# Sample HTML fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_html_inline():
    """Page with enough inline CSS that linked stylesheets are not fetched."""
    filler = "\n".join(f".rule-{i} {{ margin: {i}px; }}" for i in range(40))
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <title>Inline Styles</title>
    <style>
        :root {{ --accent: #ed247c; }}
        body {{ font-family: 'Lato', sans-serif; color: #333333; }}
        {filler}
    </style>
    <link rel="stylesheet" href="/css/main.css">
</head>
<body>
    <div style="color: #0066cc">Hello</div>
    <p style="padding: 12px">World</p>
</body>
</html>"""


@pytest.fixture
def sample_html_linked():
    """Page that relies on linked stylesheets."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <title>Linked Styles</title>
    <link rel="stylesheet" href="/css/one.css">
    <link rel="stylesheet" href="css/two.css">
    <link rel="stylesheet" href="https://cdn.example.com/three.css">
    <link rel="stylesheet" href="/css/four.css">
    <link rel="icon" href="/favicon.ico">
</head>
<body>
    <h1>Linked</h1>
</body>
</html>"""
