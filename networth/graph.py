"""
graph.py - History chart

Turns a History into one line per requested account or asset, draws it with
matplotlib and hands the resulting SVG to a browser program.

Series per name:
    net                     sum of the non-built-in balances of each frame
    spending, receiving     the monthly totals of each frame
    asset                   end-of-month worth (amount * price)
    any other account       end-of-month balance

Every value is divided by the normalisation factor returned by the report,
so a redacted report gives a redacted chart.
"""

from __future__ import annotations
from pathlib import Path
import subprocess
import tempfile
from typing import List, Optional, Sequence

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .config import GraphColours, DEFAULT_BROWSER
from .core import Builtin, NR_BUILT_IN_ACCOUNTS
from .engine import History, PeriodFrame
from .logging_setup import get_logger
from .names import NameBank

logger = get_logger(__name__)

DEFAULT_INCLUDES = (Builtin.NET.label,)

GRAPH_FILENAME = "networth.svg"


def _frame_value(frame: PeriodFrame, name_id: int) -> float:
    if name_id == Builtin.NET:
        return sum(v for k, v in frame.balances.items() if k >= NR_BUILT_IN_ACCOUNTS)
    if name_id == Builtin.SPENDING:
        return frame.spending
    if name_id == Builtin.RECEIVING:
        return frame.receiving
    if name_id in frame.worth:
        return frame.worth[name_id]
    return frame.balances.get(name_id, 0.0)


def series(names: NameBank, history: History, name: str,
           norm_fac: float = 1.0) -> Optional[np.ndarray]:
    """
    Monthly values of one account or asset.

    Returns:
        One value per frame, divided by ``norm_fac``, or None if ``name``
        was never registered
    """
    name_id = names.lookup(name)
    if name_id is None:
        return None
    values = np.array([_frame_value(frame, name_id) for frame in history], dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        return values / np.float64(norm_fac)


def _style_axes(fig, ax, colours: GraphColours) -> None:
    fig.patch.set_facecolor(colours.background)
    ax.set_facecolor(colours.background)
    ax.tick_params(colors=colours.foreground)
    for spine in ax.spines.values():
        spine.set_color(colours.foreground)
    ax.grid(True, color=colours.foreground, alpha=0.2)
    ax.axhline(0, color=colours.foreground, linewidth=0.8)


def graph(
    norm_fac: float,
    names: NameBank,
    history: History,
    includes: Sequence[str] = (),
    colours: Optional[GraphColours] = None,
    browser: str = DEFAULT_BROWSER,
    year_digits: int = 4,
    use_month_name: bool = True,
    output_dir: Optional[Path] = None,
) -> Path:
    """
    Draw the requested series and open the chart.

    Args:
        norm_fac: Divisor for every value (1.0 unless redacting)
        names: NameBank of the pass
        history: Closed History of the pass
        includes: Names to draw, in legend order (``net`` if empty)
        colours: Chart colours (defaults if None)
        browser: Program launched as ``browser <file>``
        year_digits: Trailing year digits in the date labels (0-4)
        use_month_name: Month names instead of numbers in the date labels
        output_dir: Directory for the SVG (a fresh temporary one if None)

    Returns:
        Path of the written SVG
    """
    colours = colours or GraphColours()
    includes = tuple(includes) or DEFAULT_INCLUDES
    labels = [frame.date.format(year_digits, use_month_name) for frame in history]
    x = np.arange(len(labels))

    fig, ax = plt.subplots(figsize=(12, 6))
    _style_axes(fig, ax, colours)

    drawn: List[str] = []
    for name in includes:
        values = series(names, history, name, norm_fac)
        if values is None:
            logger.warning("skipping unknown name %r in graph accounts", name)
            continue
        colour = colours.lines[len(drawn) % len(colours.lines)]
        ax.plot(x, values, label=name, color=colour, linewidth=1.5)
        drawn.append(name)

    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=80, color=colours.foreground)
    if drawn:
        legend = ax.legend(loc="upper left", facecolor=colours.background,
                           edgecolor=colours.foreground)
        for text in legend.get_texts():
            text.set_color(colours.foreground)
    fig.subplots_adjust(left=0.06, bottom=0.15, right=0.98, top=0.95)

    out_dir = Path(output_dir) if output_dir is not None else Path(tempfile.mkdtemp(prefix="networth-"))
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / GRAPH_FILENAME
    fig.savefig(path, format="svg", facecolor=colours.background)
    plt.close(fig)
    logger.info("wrote %d series over %d months to %s (scale 1/%s)",
                len(drawn), len(labels), path, norm_fac)

    subprocess.Popen([browser, str(path)], start_new_session=True)
    return path
