"""
summary.py - Net worth report

Derives the aggregate figures (net worth, debt, yield, asset split,
trailing spending and saving rate, projections) from a finished pass and
prints them to the terminal with rich.

The built-in aggregate accounts are never posted to by the engine; every
aggregate here is computed from raw balances. Ratios go through
core.ratio(), so empty periods show up as inf/nan instead of aborting the
report.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from .config import (
    ReportOptions,
    PROJECTION_SCENARIOS, PROJECTION_MONTH_CAP, REFERENCE_YIELD,
)
from .core import (
    Builtin, BUILTIN_ASSETS, AMOUNT_EPSILON, TRAILING_MONTHS,
    ratio,
)
from .engine import History, LedgerState
from .logging_setup import get_logger
from .names import NameBank

logger = get_logger(__name__)


# ============================================================================
# DERIVED FIGURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class AssetRow:
    name: str
    amount: float
    worth: float
    price: float
    share: float


@dataclass(frozen=True, slots=True)
class Projection:
    """
    How long the holdings last at trailing spending.

    Attributes:
        inflation: Yearly inflation in percent.
        roi: Yearly return on the non-fiat part in percent.
        months: Months until depletion.
        capped: True if the holdings outlast PROJECTION_MONTH_CAP.
    """
    inflation: float
    roi: float
    months: float
    capped: bool


@dataclass(frozen=True)
class Summary:
    """Everything the report prints, before rounding and colouring."""
    net: float
    debt: float
    yield_: float
    roi: float
    assets: float
    fiat: float
    shadow_fiat: float
    pos_sum: float
    holdings: float
    min_sum: float
    norm_fac: float
    holding_error: float
    assets_error: float
    fiat_split: float
    assets_split: float
    spent_12m: float
    received_12m: float
    saving_rate: float
    time_flat: float
    yield_cover: float
    accounts: List[Tuple[str, float]] = field(default_factory=list)
    asset_rows: List[AssetRow] = field(default_factory=list)
    projections: List[Projection] = field(default_factory=list)


# Built-in ids listed as accounts (the fiat ones are assets).
BUILTIN_ACCOUNTS = tuple(b for b in Builtin if b not in BUILTIN_ASSETS)


def _account_ids(names: NameBank, state: LedgerState) -> List[int]:
    assets = set(state.asset_amounts)
    return [i for i in names.user_ids() if i in state.account_balances and i not in assets]


def _asset_ids(names: NameBank, state: LedgerState) -> List[int]:
    return [i for i in range(len(names)) if i in state.asset_amounts]


def project(total: float, fiat: float, monthly_cost: float,
            inflation_rate: float, roi_rate: float) -> Projection:
    """
    Months until ``total`` is spent at ``monthly_cost``.

    Each month the cost grows with inflation and the non-fiat part of what is
    left grows with the ROI. Stops at PROJECTION_MONTH_CAP.
    """
    inflation = (1.0 + inflation_rate * 0.01) ** (1.0 / 12.0)
    roi = (1.0 + roi_rate * 0.01) ** (1.0 / 12.0)
    invested = total - fiat
    months = 0.0
    while months < PROJECTION_MONTH_CAP:
        if total > monthly_cost:
            total -= monthly_cost
            monthly_cost *= inflation
            months += 1.0
            invested = min(invested, total)
            total -= invested
            invested *= roi
            total += invested
        else:
            return Projection(inflation_rate, roi_rate, months + ratio(total, monthly_cost), False)
    return Projection(inflation_rate, roi_rate, months, True)


def summarize(
    names: NameBank,
    state: LedgerState,
    history: History,
    options: Optional[ReportOptions] = None,
) -> Summary:
    """
    Compute the report figures.

    Args:
        names: NameBank of the pass
        state: Final LedgerState
        history: History of the same pass
        options: Report options (defaults if omitted)

    Returns:
        Summary with every value already divided by norm_fac where the
        printed report shows it normalised.
    """
    options = options or ReportOptions()
    account_ids = _account_ids(names, state)
    asset_ids = _asset_ids(names, state)

    balances = [state.balance(i) for i in account_ids]
    pos_sum = sum(b for b in balances if b > 0.0)
    net = sum(balances)
    debt = net - pos_sum
    holdings = sum(state.worth(i) for i in asset_ids)
    assets = sum(state.worth(i) for i in asset_ids if i not in BUILTIN_ASSETS)
    fiat = state.asset_amounts.get(Builtin.FIAT, 0.0)
    shadow_fiat = state.asset_amounts.get(Builtin.SHADOW_FIAT, 0.0)
    min_sum = min(pos_sum, holdings)
    norm_fac = min_sum if options.redact else 1.0

    fiat_split = ratio(fiat, holdings)
    assets_split = 1.0 - fiat_split
    spent = history.trailing_spending(TRAILING_MONTHS)
    received = history.trailing_receiving(TRAILING_MONTHS)
    assets_error = max(assets - pos_sum * assets_split, assets - holdings * assets_split)

    # net and assets are shown derived; every other account by its balance
    derived = {Builtin.NET: net, Builtin.ASSETS: assets}
    if options.includes:
        listed = []
        for name in options.includes:
            name_id = names.lookup(name)
            if name_id is None:
                logger.warning("unknown account %r in summary accounts", name)
                continue
            listed.append(name_id)
    else:
        listed = list(BUILTIN_ACCOUNTS) + account_ids
    accounts = []
    for name_id in listed:
        name = names.resolve(name_id)
        value = derived.get(name_id, state.balance(name_id))
        accounts.append((options.aliases.get(name, name), ratio(value, norm_fac)))

    asset_rows = []
    for i in asset_ids:
        amount, price = state.asset_amounts[i], state.asset_prices.get(i, 0.0)
        if price == 0.0 or amount < AMOUNT_EPSILON:
            continue
        worth = amount * price
        if worth < options.min_asset_worth:
            continue
        asset_rows.append(AssetRow(names.resolve(i), amount, worth, price, ratio(worth, holdings)))
    asset_rows.sort(key=lambda row: row.share, reverse=True)

    projections = [
        project(min_sum, fiat, spent / 12.0, inflation, roi)
        for inflation, roi in PROJECTION_SCENARIOS
    ]

    return Summary(
        net=ratio(net, norm_fac),
        debt=ratio(debt, norm_fac),
        yield_=ratio(-state.balance(Builtin.YIELD), norm_fac),
        roi=ratio(-state.balance(Builtin.ROI), norm_fac),
        assets=ratio(assets, norm_fac),
        fiat=ratio(fiat, norm_fac),
        shadow_fiat=ratio(shadow_fiat, norm_fac),
        pos_sum=1.0 if options.redact else pos_sum,
        holdings=ratio(holdings, norm_fac),
        min_sum=min_sum,
        norm_fac=norm_fac,
        holding_error=ratio(pos_sum - holdings, norm_fac),
        assets_error=ratio(assets_error, norm_fac),
        fiat_split=fiat_split,
        assets_split=assets_split,
        spent_12m=ratio(spent, norm_fac),
        received_12m=ratio(received, norm_fac),
        saving_rate=ratio(received - spent, received) * 100.0,
        time_flat=ratio(net, spent) * 12.0,
        yield_cover=ratio(min_sum * REFERENCE_YIELD, spent) * 100.0,
        accounts=accounts,
        asset_rows=asset_rows,
        projections=projections,
    )


# ============================================================================
# RENDERING
# ============================================================================

def format_value(value: float, rounding: str = "cents") -> str:
    """Format a value according to a rounding mode; inf/nan pass through."""
    if rounding == "none":
        return f"{value}"
    if rounding == "whole":
        return f"{value:.0f}"
    return f"{value:.2f}"


def _sign_style(value: float) -> str:
    return "red" if value < 0.0 else "green"


def _months_or_years(months: float) -> Tuple[float, str]:
    if abs(months) > 24.0:
        return months / 12.0, "years"
    return months, "months"


def print_summary(
    summary: Summary,
    options: Optional[ReportOptions] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Print the report sections General, Accounts, Distribution and Metrics.

    Args:
        summary: Figures from summarize()
        options: Same options summarize() was called with
        console: rich Console to print to (stdout if omitted)
    """
    options = options or ReportOptions()
    console = console or Console()
    val = lambda v: format_value(v, options.rounding)

    def line(label: str, value: float) -> None:
        console.print(f"  {label}: [{_sign_style(value)}]{val(value)}[/]")

    console.print("[bold magenta]General[/]:")
    line("Net", summary.net)
    line("Debt", summary.debt)
    line("Yield", summary.yield_)
    line("Assets", summary.assets)
    line("Fiat", summary.fiat)
    console.print(f"  Positive owned sum: [green]{val(summary.pos_sum)}[/]")
    console.print(f"  Total holdings worth: [green]{val(summary.holdings)}[/]")
    console.print(
        f"  Positive owned sum / holdings error: "
        f"[{_sign_style(summary.holding_error)}]{summary.holding_error}[/] which is "
        f"[green]{ratio(abs(summary.holding_error) * summary.norm_fac, summary.min_sum) * 100.0}[/]%"
    )
    console.print(
        f"  Assets / (positive sum, holdings) error: "
        f"[{_sign_style(summary.assets_error)}]{summary.assets_error}[/] which is "
        f"[green]{ratio(abs(summary.assets_error) * summary.norm_fac, summary.min_sum) * 100.0}[/]%"
    )
    console.print(f"  You spent [{_sign_style(summary.spent_12m)}]{val(summary.spent_12m)}[/] the past year")
    console.print(f"  You received [{_sign_style(summary.received_12m)}]{val(summary.received_12m)}[/] the past year")
    console.print(
        f"  Your saving rate is [{_sign_style(summary.saving_rate)}]{val(summary.saving_rate)}[/]% the past year"
    )

    console.print("[bold magenta]Accounts[/]:")
    for name, value in summary.accounts:
        console.print(f"  [blue]{escape(name)}[/]: [{_sign_style(value)}]{val(value)}[/]")

    console.print("[bold magenta]Distribution[/]:")
    console.print(
        f"  With a split of [yellow]{val(summary.assets_split * 100.0)}[/]% assets "
        f"and [yellow]{val(summary.fiat_split * 100.0)}[/]% fiat"
    )
    console.print(
        f"  A total of [{_sign_style(summary.shadow_fiat)}]{summary.shadow_fiat}[/] "
        f"fiat is stuck in the shadowrealm"
    )
    for row in summary.asset_rows:
        share = val(row.share * 100.0)
        if options.redact:
            console.print(f"  [blue]{escape(row.name)}[/] at [yellow]{share}[/]% of total")
        else:
            console.print(
                f"  [blue]{escape(row.name)}[/]: [{_sign_style(row.amount)}]{val(row.amount)}[/] "
                f"worth [{_sign_style(row.worth)}]{val(row.worth)}[/] "
                f"priced [{_sign_style(row.price)}]{val(row.price)}[/] "
                f"at [yellow]{share}[/]% of total"
            )

    console.print("[bold magenta]Metrics[/]:")
    flat, unit = _months_or_years(summary.time_flat)
    console.print(
        f"  Your net worth is [{_sign_style(summary.time_flat)}]{val(flat)}[/] {unit} "
        f"(no Inflation and ROI)"
    )
    console.print(
        f"  A [green]{REFERENCE_YIELD * 100:g}[/]% yield would give you "
        f"[green]{val(summary.yield_cover)}[/]% of your spending."
    )
    for p in summary.projections:
        if p.capped:
            console.print(
                f"  Your assets are worth [green]{PROJECTION_MONTH_CAP // 12}+[/] years "
                f"({p.inflation:g}% Infl., {p.roi:g}% ROI)"
            )
            continue
        span, unit = _months_or_years(p.months)
        infl_style = "red" if p.inflation > 0.0 else "green"
        roi_style = "green" if p.roi > 0.0 else "red"
        console.print(
            f"  Your assets are worth [{_sign_style(p.months)}]{val(span)}[/] {unit} "
            f"([{infl_style}]{p.inflation:g}[/]% Infl., [{roi_style}]{p.roi:g}[/]% ROI)"
        )


def report(
    names: NameBank,
    state: LedgerState,
    history: History,
    options: Optional[ReportOptions] = None,
    console: Optional[Console] = None,
) -> float:
    """
    summarize() and print_summary() in one go.

    Returns:
        The normalisation factor, so a chart of the same pass can be redacted
        the same way
    """
    summary = summarize(names, state, history, options)
    print_summary(summary, options, console)
    return summary.norm_fac
