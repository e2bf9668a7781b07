"""
conftest.py - Shared pytest fixtures for networth tests

Provides common fixtures used across unit, conformance and functional tests:
- Fresh NameBank and LedgerState
- Sample ledger texts (two-month spending, investing household)
- Parsed and replayed passes over those texts
"""

import pytest
from typing import List, Tuple

from networth import (
    NameBank, LedgerState, History, Transaction,
    parse_text, spending,
)


# =============================================================================
# SAMPLE LEDGERS
# =============================================================================

TWO_MONTH_LEDGER = """\
2024-01-05 checking > spending 50
2024-02-10 checking > spending 30
"""

HOUSEHOLD_LEDGER = """\
# salary, rent, groceries and an index fund
2024-01-01
receiving > checking 3000
checking > spending 1200, savings 500   ; rent and savings
checking > fiat 1300 @ 1
broker > ACME 10 @ 50

2024-02-01
receiving > checking 3000
checking > spending 1400
ACME = 55

2024-04-15 checking > spending 200
spending > checking 20                  # refund
"""


def run_pass(text: str) -> Tuple[List[Transaction], NameBank, LedgerState, History]:
    """Parse ``text`` and replay it through spending()."""
    transactions, names = parse_text(text)
    state = LedgerState()
    history = spending(transactions, state)
    return transactions, names, state, history


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def names():
    """Fresh NameBank holding only the built-ins."""
    return NameBank()


@pytest.fixture
def state():
    """Fresh LedgerState."""
    return LedgerState()


@pytest.fixture
def two_month_text():
    return TWO_MONTH_LEDGER


@pytest.fixture
def household_text():
    return HOUSEHOLD_LEDGER


# =============================================================================
# PASS FIXTURES
# =============================================================================

@pytest.fixture
def two_month_pass():
    """(transactions, names, state, history) for TWO_MONTH_LEDGER."""
    return run_pass(TWO_MONTH_LEDGER)


@pytest.fixture
def household_pass():
    """(transactions, names, state, history) for HOUSEHOLD_LEDGER."""
    return run_pass(HOUSEHOLD_LEDGER)


@pytest.fixture
def ledger_file(tmp_path):
    """HOUSEHOLD_LEDGER written to disk."""
    path = tmp_path / "household.ledger"
    path.write_text(HOUSEHOLD_LEDGER, encoding="utf-8")
    return path


@pytest.fixture
def run_ledger():
    """run_pass() for ledgers built inside a test."""
    return run_pass
