#!/usr/bin/env python3
"""
Extract a ranked design language (colors, fonts, gradients, spacing, radii,
shadows) from aggregated style text and render it as CSS custom properties.

The input is a single blob of unparsed CSS-like text, usually produced by
collect-styles.py. Matching is regex based on purpose: there is no tokenizer,
no cascade, and no specificity resolution. Gradients are the one place where
the text is scanned by hand, to balance nested parentheses.

Usage:
    python scripts/extract-design-tokens.py --css styles.css --output tokens.css
    python scripts/extract-design-tokens.py --css styles.css --json tokens.json
    cat styles.css | python scripts/extract-design-tokens.py --css -
"""

import argparse
import json
import math
import re
import sys
from collections import Counter
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Pure white/black, near-white/near-black and transparent, in both hex forms
NOISE_COLORS = (
    "#ffffff", "#fff", "#000000", "#000", "#transparent",
    "#fefefe", "#010101", "#fcfcfc", "#fdfdfd",
)

GENERIC_FONTS = ("serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui")

DEFAULT_FONTS = ("Inter", "Roboto", "Arial")

GRADIENT_FUNCTIONS = (
    "repeating-linear-gradient",
    "repeating-radial-gradient",
    "linear-gradient",
    "radial-gradient",
    "conic-gradient",
)


@dataclass(frozen=True)
class ExtractionConfig:
    """Tunable constants for one extraction run."""

    noise_colors: tuple = NOISE_COLORS
    generic_fonts: tuple = GENERIC_FONTS
    default_fonts: tuple = DEFAULT_FONTS
    max_color_candidates: int = 15
    max_colors: int = 10
    max_fonts: int = 8
    font_face_weight: int = 3
    similarity_threshold: int = 30
    max_gradients: int = 8
    max_spacing: int = 5
    max_radii: int = 5
    max_shadows: int = 5


DEFAULT_CONFIG = ExtractionConfig()


def load_config(path, base=DEFAULT_CONFIG):
    """Read config overrides from a JSON object file.

    List values replace the defaults wholesale, e.g.
    ``{"noise_colors": ["#fff", "#f5f5f5"], "max_colors": 6}``.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    known = {f.name: f for f in fields(ExtractionConfig)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown config key '{key}' in {path}")
        overrides[key] = _checked_value(key, value, getattr(base, key), path)

    return _replace_config(base, **overrides)


def _checked_value(key, value, default, path):
    if isinstance(default, tuple):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"Config key '{key}' must be a list of strings in {path}")
        return tuple(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Config key '{key}' must be an integer in {path}")
    return value


def _replace_config(config, **overrides):
    values = {f.name: getattr(config, f.name) for f in fields(ExtractionConfig)}
    values.update(overrides)
    return ExtractionConfig(**values)


# ---------------------------------------------------------------------------
# Color-space utilities
# ---------------------------------------------------------------------------

HEX_RGB_PATTERN = re.compile(r'^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$')


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def normalize_hex(raw):
    """Expand #abc to #aabbcc and lowercase."""
    raw = raw.lower()
    if len(raw) == 4:
        return "#" + raw[1] * 2 + raw[2] * 2 + raw[3] * 2
    return raw


def rgb_to_hex(r, g, b):
    """Convert integer channels (already validated to 0-255) to #rrggbb."""
    return f"#{r:02x}{g:02x}{b:02x}"


def hsl_to_hex(h, s, l):
    """Convert hue in degrees and saturation/lightness in percent to #rrggbb."""
    h = h % 360
    s /= 100
    l /= 100
    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l - c / 2

    if h < 60:
        r, g, b = c, x, 0
    elif h < 120:
        r, g, b = x, c, 0
    elif h < 180:
        r, g, b = 0, c, x
    elif h < 240:
        r, g, b = 0, x, c
    elif h < 300:
        r, g, b = x, 0, c
    else:
        r, g, b = c, 0, x

    return rgb_to_hex(
        _round_half_up((r + m) * 255),
        _round_half_up((g + m) * 255),
        _round_half_up((b + m) * 255),
    )


def hex_to_rgb(hex_value):
    """Return (r, g, b) for a 6-digit hex color, or None if it does not parse."""
    match = HEX_RGB_PATTERN.match(hex_value)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def relative_luminance(rgb):
    """WCAG 2.x relative luminance of an (r, g, b) triple."""
    def channel(value):
        value /= 255
        if value <= 0.03928:
            return value / 12.92
        return ((value + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(v) for v in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1, color2):
    """WCAG contrast ratio between two hex colors, or None if either is invalid."""
    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if rgb1 is None or rgb2 is None:
        return None

    l1 = relative_luminance(rgb1)
    l2 = relative_luminance(rgb2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def is_light_color(hex_value):
    rgb = hex_to_rgb(hex_value)
    if rgb is None:
        return True
    return relative_luminance(rgb) > 0.5


def wcag_level(hex_value):
    """Best WCAG rating of the color against white or black text."""
    on_white = contrast_ratio(hex_value, "#ffffff")
    on_black = contrast_ratio(hex_value, "#000000")
    if on_white is None or on_black is None:
        return None

    best = max(on_white, on_black)
    if best >= 7:
        return "AAA"
    if best >= 4.5:
        return "AA"
    return "Poor"


def is_similar(color1, color2, threshold=30):
    """Sum of absolute RGB channel differences below ``threshold``.

    A Manhattan distance in sRGB, not a perceptual metric such as CIE delta E.
    """
    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if rgb1 is None or rgb2 is None:
        return False
    return sum(abs(a - b) for a, b in zip(rgb1, rgb2)) < threshold


# ---------------------------------------------------------------------------
# Pattern extractors
# ---------------------------------------------------------------------------

# 12, 12.5 or .5
_NUMBER = r'(?:\d+(?:\.\d+)?|\.\d+)'

HEX_PATTERN = re.compile(r'#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})\b')
RGB_PATTERN = re.compile(
    r'rgba?\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)(?:\s*,\s*[\d.]+)?\s*\)'
)
HSL_PATTERN = re.compile(
    r'hsla?\s*\(\s*(' + _NUMBER + r')\s*,\s*(' + _NUMBER + r')%\s*,\s*(' + _NUMBER + r')%'
)
FONT_FAMILY_PATTERN = re.compile(r'font-family\s*:\s*([^;{}]+)', re.IGNORECASE)
FONT_FACE_PATTERN = re.compile(r'@font-face\s*\{[^}]*\}?', re.IGNORECASE)
FONT_FACE_NAME_PATTERN = re.compile(r'font-family\s*:\s*[\'"]?([^\'";}]+)[\'"]?', re.IGNORECASE)
GRADIENT_PATTERN = re.compile(
    r'(?:' + '|'.join(GRADIENT_FUNCTIONS) + r')\s*\(', re.IGNORECASE
)
SPACING_PATTERN = re.compile(r'(?:padding|margin):\s*([^;{}]+)', re.IGNORECASE)
SPACING_UNIT_PATTERN = re.compile(r'\d+(?:px|rem|em)')
RADIUS_PATTERN = re.compile(r'border-radius:\s*([^;{}]+)', re.IGNORECASE)
RADIUS_UNIT_PATTERN = re.compile(r'\d+(?:px|rem|em|%)')
SHADOW_PATTERN = re.compile(r'box-shadow:\s*([^;{}]+)', re.IGNORECASE)


def extract_hex_colors(css_text):
    """Count #rgb and #rrggbb colors, merged under their 6-digit lowercase form."""
    return Counter(normalize_hex(m.group(0)) for m in HEX_PATTERN.finditer(css_text))


def extract_rgb_colors(css_text):
    """Count rgb()/rgba() colors with every channel in 0-255. Alpha is ignored."""
    colors = Counter()
    for match in RGB_PATTERN.finditer(css_text):
        r, g, b = (int(v) for v in match.groups())
        if all(0 <= v <= 255 for v in (r, g, b)):
            colors[rgb_to_hex(r, g, b)] += 1
    return colors


def extract_hsl_colors(css_text):
    colors = Counter()
    for match in HSL_PATTERN.finditer(css_text):
        h, s, l = (float(v) for v in match.groups())
        if 0 <= h <= 360 and 0 <= s <= 100 and 0 <= l <= 100:
            colors[hsl_to_hex(h, s, l)] += 1
    return colors


def count_colors(css_text):
    """Occurrence count of every color in the text, by canonical hex."""
    colors = extract_hex_colors(css_text)
    colors.update(extract_rgb_colors(css_text))
    colors.update(extract_hsl_colors(css_text))
    return colors


def parse_font_stack(stack):
    """Split a font-family value into unquoted, non-empty names."""
    names = []
    for part in stack.split(","):
        name = re.sub(r'[\'"]', "", part).strip()
        if name:
            names.append(name)
    return names


def is_generic_font(name, generic_fonts=GENERIC_FONTS):
    return name.lower() in {g.lower() for g in generic_fonts}


def count_fonts(css_text, config=DEFAULT_CONFIG):
    """Count font names from font-family declarations.

    A name declared in an @font-face block is credited ``font_face_weight``
    occurrences. Face blocks are left out of the ordinary scan so the
    declaration is not counted twice.
    """
    fonts = Counter()

    for block in FONT_FACE_PATTERN.finditer(css_text):
        match = FONT_FACE_NAME_PATTERN.search(block.group(0))
        if not match:
            continue
        name = match.group(1).strip()
        if name and not is_generic_font(name, config.generic_fonts):
            fonts[name] += config.font_face_weight

    remaining = FONT_FACE_PATTERN.sub(" ", css_text)
    for match in FONT_FAMILY_PATTERN.finditer(remaining):
        for name in parse_font_stack(match.group(1).strip()):
            if not is_generic_font(name, config.generic_fonts):
                fonts[name] += 1

    return fonts


def _balanced_end(text, start):
    """Index just past the ')' closing the '(' before ``start``, or None.

    Gives up at a declaration or block boundary so a truncated value does not
    swallow the rest of the stylesheet.
    """
    depth = 1
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos + 1
        elif char in ";{}":
            return None
        pos += 1
    return None


def extract_gradients(css_text, config=DEFAULT_CONFIG):
    """Distinct gradient expressions in first-seen order, nested calls included."""
    gradients = []
    pos = 0
    while len(gradients) < config.max_gradients:
        match = GRADIENT_PATTERN.search(css_text, pos)
        if not match:
            break

        end = _balanced_end(css_text, match.end())
        if end is None:
            pos = match.end()
            continue

        gradient = css_text[match.start():end].strip()
        if 20 < len(gradient) < 300 and "undefined" not in gradient:
            if gradient not in gradients:
                gradients.append(gradient)
        pos = end

    return gradients


def count_spacing(css_text):
    """Count padding/margin values that carry a px, rem or em length."""
    spacing = Counter()
    for match in SPACING_PATTERN.finditer(css_text):
        value = match.group(1).strip()
        if SPACING_UNIT_PATTERN.search(value):
            spacing[value] += 1
    return spacing


def _distinct_values(pattern, css_text, limit, accept):
    values = []
    for match in pattern.finditer(css_text):
        value = match.group(1).strip()
        if accept(value) and value not in values:
            values.append(value)
            if len(values) >= limit:
                break
    return values


def extract_border_radii(css_text, config=DEFAULT_CONFIG):
    return _distinct_values(
        RADIUS_PATTERN, css_text, config.max_radii,
        lambda value: RADIUS_UNIT_PATTERN.search(value) is not None,
    )


def extract_shadows(css_text, config=DEFAULT_CONFIG):
    return _distinct_values(
        SHADOW_PATTERN, css_text, config.max_shadows,
        lambda value: value != "none" and 10 < len(value) < 150,
    )


# ---------------------------------------------------------------------------
# Ranking & dedup
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TokenStats:
    count: int
    percentage: float
    total: int

    def to_dict(self):
        return {"count": self.count, "percentage": self.percentage, "total": self.total}


@dataclass(frozen=True)
class TokenCollection:
    """Ranked token values plus usage statistics keyed by value."""

    values: tuple = ()
    stats: Mapping[str, TokenStats] = field(default_factory=lambda: MappingProxyType({}))
    fallback: bool = False

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __bool__(self):
        return bool(self.values)


def _percentage(count, total):
    # Ties round up, e.g. 1 of 16 is 6.3
    exact = Decimal(str(100 * count / total))
    return float(exact.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _by_frequency(counts):
    # sorted() is stable, so ties keep first-seen order
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def _collection(ranked, total, fallback=False):
    values = tuple(value for value, _ in ranked)
    stats = {value: TokenStats(count, _percentage(count, total), total) for value, count in ranked}
    return TokenCollection(values, MappingProxyType(stats), fallback)


def rank_colors(counts, config=DEFAULT_CONFIG):
    """Top colors by frequency with near-duplicates removed.

    Only the first ``max_color_candidates`` survivors of the noise filter are
    considered, so heavy similarity rejection can leave fewer than
    ``max_colors`` results even when later candidates exist.
    """
    total = sum(counts.values())
    noise = {c.lower() for c in config.noise_colors}

    candidates = [item for item in _by_frequency(counts) if item[0].lower() not in noise]
    candidates = candidates[:config.max_color_candidates]

    accepted = []
    for color, count in candidates:
        if any(is_similar(color, kept, config.similarity_threshold) for kept, _ in accepted):
            continue
        accepted.append((color, count))
        if len(accepted) >= config.max_colors:
            break

    return _collection(accepted, total)


def rank_fonts(counts, config=DEFAULT_CONFIG):
    """Top fonts by frequency, or the default list with no stats if none were found."""
    if not counts:
        return TokenCollection(tuple(config.default_fonts), MappingProxyType({}), fallback=True)

    total = sum(counts.values())
    return _collection(_by_frequency(counts)[:config.max_fonts], total)


def rank_spacing(counts, config=DEFAULT_CONFIG):
    total = sum(counts.values())
    return _collection(_by_frequency(counts)[:config.max_spacing], total)


# ---------------------------------------------------------------------------
# Extraction result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractionResult:
    colors: TokenCollection
    fonts: TokenCollection
    gradients: TokenCollection
    spacing: TokenCollection
    radii: TokenCollection
    shadows: TokenCollection
    color_occurrences: int = 0
    font_occurrences: int = 0

    @property
    def is_empty(self):
        """True when the text held no colors and no fonts at all.

        A page whose colors were all filtered as noise is not empty.
        """
        return self.color_occurrences == 0 and self.font_occurrences == 0

    def to_dict(self, source=None):
        """JSON-serializable export document."""
        return {
            "url": source,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "colors": list(self.colors),
            "colorStats": {
                color: dict(stats.to_dict(), wcag=wcag_level(color))
                for color, stats in self.colors.stats.items()
            },
            "fonts": list(self.fonts),
            "fontStats": {font: stats.to_dict() for font, stats in self.fonts.stats.items()},
            "gradients": list(self.gradients),
            "spacing": list(self.spacing),
            "borderRadius": list(self.radii),
            "shadows": list(self.shadows),
        }


def extract_design_tokens(css_text, config=None):
    """Extract every token category from aggregated style text.

    Pure and stateless: each call builds its own frequency maps, and the same
    text always gives the same result.
    """
    config = config or DEFAULT_CONFIG
    css_text = css_text or ""

    color_counts = count_colors(css_text)
    font_counts = count_fonts(css_text, config)

    return ExtractionResult(
        colors=rank_colors(color_counts, config),
        fonts=rank_fonts(font_counts, config),
        gradients=TokenCollection(tuple(extract_gradients(css_text, config))),
        spacing=rank_spacing(count_spacing(css_text), config),
        radii=TokenCollection(tuple(extract_border_radii(css_text, config))),
        shadows=TokenCollection(tuple(extract_shadows(css_text, config))),
        color_occurrences=sum(color_counts.values()),
        font_occurrences=sum(font_counts.values()),
    )


# ---------------------------------------------------------------------------
# Token serializer
# ---------------------------------------------------------------------------

def color_variable_name(index):
    if index == 0:
        return "--primary-color"
    if index == 1:
        return "--secondary-color"
    if index == 2:
        return "--accent-color"
    return f"--color-{index + 1}"


def font_variable_name(index):
    if index == 0:
        return "--font-primary"
    if index == 1:
        return "--font-secondary"
    return f"--font-{index + 1}"


def render_css_variables(result: ExtractionResult) -> str:
    """Render the result as a :root block of custom properties.

    Sections appear in a fixed order and are left out when empty.
    """
    sections = []

    if result.colors:
        sections.append(("Color Palette", [
            f"  {color_variable_name(i)}: {color};" for i, color in enumerate(result.colors)
        ]))

    if result.fonts:
        sections.append(("Typography", [
            f"  {font_variable_name(i)}: {font}, sans-serif;" for i, font in enumerate(result.fonts)
        ]))

    for title, prefix, collection in (
        ("Spacing", "spacing", result.spacing),
        ("Border Radius", "radius", result.radii),
        ("Shadows", "shadow", result.shadows),
    ):
        if collection:
            sections.append((title, [
                f"  --{prefix}-{i}: {value};" for i, value in enumerate(collection, 1)
            ]))

    blocks = ["\n".join([f"  /* {title} */"] + lines) for title, lines in sections]
    body = "\n\n".join(blocks)
    return ":root {\n" + (body + "\n" if body else "") + "}\n"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def print_summary(result: ExtractionResult):
    """Print a human-readable summary of the extracted tokens to stdout."""
    print("\n--- Design Token Summary ---\n")

    print(f"Colors ({len(result.colors)} of {result.color_occurrences} occurrences):")
    for color in result.colors:
        stats = result.colors.stats[color]
        tone = "light" if is_light_color(color) else "dark"
        print(f"  {color.upper():<9} {stats.percentage:>5}%  {tone:<5}  WCAG: {wcag_level(color)}")

    label = "defaults, none found" if result.fonts.fallback else f"{len(result.fonts)}"
    print(f"\nFonts ({label}):")
    for index, font in enumerate(result.fonts):
        prefix = {0: "Primary: ", 1: "Secondary: "}.get(index, "")
        stats = result.fonts.stats.get(font)
        suffix = f" ({stats.percentage}%)" if stats else ""
        print(f"  {prefix}{font}{suffix}")

    for title, collection in (
        ("Gradients", result.gradients),
        ("Spacing", result.spacing),
        ("Border radius", result.radii),
        ("Shadows", result.shadows),
    ):
        if collection:
            print(f"\n{title} ({len(collection)}):")
            for value in collection:
                print(f"  {value}")


def read_css(path):
    if path == "-":
        return sys.stdin.buffer.read().decode("utf-8", errors="replace")
    return Path(path).read_text(encoding="utf-8", errors="replace")


def build_config(args):
    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    if args.ignore_color:
        extra = tuple(c.lower() for c in args.ignore_color)
        config = _replace_config(config, noise_colors=config.noise_colors + extra)
    if args.generic_font:
        config = _replace_config(config, generic_fonts=config.generic_fonts + tuple(args.generic_font))
    return config


def main():
    parser = argparse.ArgumentParser(
        description=(
            "Extract ranked colors, fonts, gradients, spacing, border radii and shadows "
            "from aggregated style text and render them as CSS custom properties."
        )
    )
    parser.add_argument(
        "--css", required=True,
        help="Path to the aggregated style text (use '-' for stdin)"
    )
    parser.add_argument(
        "--output",
        help="Write the :root custom-property block to this file (default: print it)"
    )
    parser.add_argument(
        "--json",
        help="Also export the full result, with usage statistics, as JSON"
    )
    parser.add_argument(
        "--source",
        help="URL the styles came from, recorded in the JSON export"
    )
    parser.add_argument(
        "--config",
        help="JSON file overriding extraction constants (noise colors, caps, weights)"
    )
    parser.add_argument(
        "--ignore-color", action="append", metavar="HEX",
        help="Extra color to treat as noise (repeatable)"
    )
    parser.add_argument(
        "--generic-font", action="append", metavar="NAME",
        help="Extra font name to treat as a generic family (repeatable)"
    )
    args = parser.parse_args()

    if args.css != "-" and not Path(args.css).is_file():
        print(f"Error: CSS file not found: {args.css}")
        sys.exit(1)

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: Could not load config: {e}")
        sys.exit(1)

    css_text = read_css(args.css)
    print(f"Analyzing {len(css_text)} characters of style text...")

    result = extract_design_tokens(css_text, config)
    if result.is_empty:
        print("Error: No styles found. The website might be blocking access "
              "or using JavaScript-generated styles.")
        sys.exit(1)

    css_variables = render_css_variables(result)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(css_variables, encoding="utf-8")
        print(f"\nCSS variables saved to: {output_path}")
    else:
        print()
        print(css_variables, end="")

    if args.json:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        with open(json_path, "w") as f:
            json.dump(result.to_dict(source=args.source), f, indent=2)
        print(f"JSON export saved to: {json_path}")

    print_summary(result)
    print("\nDone.")


if __name__ == "__main__":
    main()
