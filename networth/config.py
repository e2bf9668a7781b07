"""
config.py - Run configuration for the reporter and grapher

All tunables of a run live in two frozen dataclasses built by the CLI:
ReportOptions for the terminal summary and GraphOptions for the chart.
Colour palettes are loaded from plain text files.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import re
from typing import Dict, Optional, Sequence, Tuple

from .core import PaletteError

ROUNDING_MODES = ("none", "whole", "cents")

DEFAULT_BROWSER = "firefox"

# Fixed (inflation %, ROI %) scenarios for the depletion projections.
PROJECTION_SCENARIOS: Tuple[Tuple[float, float], ...] = (
    (10.0, -10.0),
    (10.0, -5.0),
    (10.0, 0.0),
    (5.0, -5.0),
    (5.0, 0.0),
    (5.0, 5.0),
    (5.0, 6.0),
    (5.0, 7.0),
    (5.0, 9.0),
)

# Yield rate used for the "a 2% yield would cover" metric.
REFERENCE_YIELD = 0.02

# Projections stop after this many months (100 years).
PROJECTION_MONTH_CAP = 1200

_HEX_COLOUR_RE = re.compile(r"#[0-9a-fA-F]{6}\b")


@dataclass(frozen=True, slots=True)
class GraphColours:
    """
    Colours used to draw a chart.

    Attributes:
        background: Figure and axes background.
        foreground: Text, ticks, spines and grid.
        lines: Line colours, cycled in the order series are drawn.
    """
    background: str = "#1d1f21"
    foreground: str = "#c5c8c6"
    lines: Tuple[str, ...] = (
        "#cc6666", "#b5bd68", "#f0c674", "#81a2be",
        "#b294bb", "#8abeb7", "#de935f", "#a3685a",
    )


@dataclass(frozen=True, slots=True)
class ReportOptions:
    """
    Options of the terminal summary.

    Attributes:
        redact: Hide absolute values by normalising them to the smaller of
            the positive owned sum and the total holdings worth.
        rounding: One of ROUNDING_MODES.
        includes: If non-empty, only these accounts are listed, in this order.
        aliases: Display names replacing account names in the listing.
        min_asset_worth: Assets worth less than this are not listed.
    """
    redact: bool = False
    rounding: str = "cents"
    includes: Tuple[str, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict)
    min_asset_worth: float = 0.0

    def __post_init__(self):
        if self.rounding not in ROUNDING_MODES:
            raise ValueError(f"rounding must be one of {ROUNDING_MODES}, got {self.rounding!r}")


@dataclass(frozen=True, slots=True)
class GraphOptions:
    """
    Options of the history chart.

    Attributes:
        includes: Names of the accounts/assets to draw, in legend order.
        colours: Chart colours.
        browser: Program used to open the rendered chart.
        year_digits: Trailing year digits shown in date labels (0-4).
        use_month_name: 3 letter month names instead of month numbers.
        output_dir: Where the SVG is written (a temporary directory if None).
    """
    includes: Tuple[str, ...] = ()
    colours: GraphColours = GraphColours()
    browser: str = DEFAULT_BROWSER
    year_digits: int = 4
    use_month_name: bool = True
    output_dir: Optional[Path] = None

    def __post_init__(self):
        object.__setattr__(self, "year_digits", min(max(int(self.year_digits), 0), 4))


def load_palette(path: Path, indices: Sequence[int]) -> GraphColours:
    """
    Build GraphColours from a palette file.

    Each line of the file is expected to carry one colour as ``#rrggbb``
    (anything else on the line is ignored, so Xresources-style files work).
    ``indices`` pick lines: background, foreground, then one per chart line.

    Args:
        path: Palette file
        indices: Zero-based line numbers (bg, fg, col0, col1, ...)

    Returns:
        GraphColours; defaults fill in whatever ``indices`` does not cover

    Raises:
        PaletteError: If the file cannot be read or a selected line has no colour
    """
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise PaletteError(f"Cannot read palette {path}: {e}") from e

    picked = []
    for index in indices:
        if index < 0 or index >= len(lines):
            raise PaletteError(f"Palette {path} has no line {index}")
        m = _HEX_COLOUR_RE.search(lines[index])
        if m is None:
            raise PaletteError(f"Palette {path} line {index} holds no #rrggbb colour")
        picked.append(m.group(0))

    defaults = GraphColours()
    if not picked:
        return defaults
    background = picked[0]
    foreground = picked[1] if len(picked) > 1 else defaults.foreground
    lines_ = tuple(picked[2:]) or defaults.lines
    return GraphColours(background, foreground, lines_)
