"""
networth - Plain-text ledger net worth engine

Parses a personal ledger, replays it into account/asset balances and a
monthly history, and reports net worth and spending trends.

Usage:
    from networth import LedgerState, parse_text, spending, summarize

    transactions, names = parse_text(
        "2024-01-05\\n"
        "checking > spending 50\\n"
        "2024-02-10 checking > spending 30\\n"
    )
    state = LedgerState()
    history = spending(transactions, state)

    checking = names.lookup("checking")
    state.balance(checking)          # -80.0
    history.trailing_spending()      # 80.0
    summary = summarize(names, state, history)

Charts live in networth.graph (imports matplotlib).
"""

# Core types
from .core import (
    Builtin,
    BUILTIN_NAMES,
    NR_BUILT_IN_ACCOUNTS,
    AMOUNT_EPSILON,
    TRAILING_MONTHS,
    TransactionKind,
    Date,
    Transaction,
    LedgerError,
    HistoryClosed,
    PaletteError,
    ratio,
)

# Names
from .names import NameBank

# Parsing
from .parser import ParseContext, parse_line, parse_ledger, parse_text

# Engine
from .engine import LedgerState, PeriodFrame, History, apply, update, spending

# Reporting
from .config import GraphColours, GraphOptions, ReportOptions, load_palette
from .summary import Summary, AssetRow, Projection, summarize, print_summary, report

__all__ = [
    'Builtin', 'BUILTIN_NAMES', 'NR_BUILT_IN_ACCOUNTS', 'AMOUNT_EPSILON', 'TRAILING_MONTHS',
    'TransactionKind', 'Date', 'Transaction',
    'LedgerError', 'HistoryClosed', 'PaletteError', 'ratio',
    'NameBank',
    'ParseContext', 'parse_line', 'parse_ledger', 'parse_text',
    'LedgerState', 'PeriodFrame', 'History', 'apply', 'update', 'spending',
    'GraphColours', 'GraphOptions', 'ReportOptions', 'load_palette',
    'Summary', 'AssetRow', 'Projection', 'summarize', 'print_summary', 'report',
]
