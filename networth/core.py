"""
Core types and pure functions for the net worth ledger.

This module provides the foundational data structures for the engine:
1. Constants: built-in identifiers, epsilons, window sizes
2. Enums: Builtin (reserved ids) and TransactionKind
3. Exceptions: LedgerError and domain-specific error types
4. Immutable data structures: Date, Transaction
5. Arithmetic helpers: ratio() with IEEE semantics

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date as _date
from enum import Enum, IntEnum
import math
import re
from typing import Optional

import numpy as np


# ============================================================================
# BUILT-IN IDENTIFIERS
# ============================================================================

class Builtin(IntEnum):
    """
    Reserved ids registered by every NameBank before any user name.

    The order here IS the id assignment order. Accounts come first, then
    the two synthetic fiat assets.
    """
    NET = 0
    YIELD = 1
    ASSETS = 2
    ROI = 3
    SPENDING = 4
    RECEIVING = 5
    FIAT = 6
    SHADOW_FIAT = 7

    @property
    def label(self) -> str:
        """Name under which the id is registered in a NameBank."""
        return BUILTIN_NAMES[self]


BUILTIN_NAMES = {
    Builtin.NET: "net",
    Builtin.YIELD: "yield",
    Builtin.ASSETS: "assets",
    Builtin.ROI: "roi",
    Builtin.SPENDING: "spending",
    Builtin.RECEIVING: "receiving",
    Builtin.FIAT: "fiat",
    Builtin.SHADOW_FIAT: "shadowfiat",
}

NR_BUILT_IN_ACCOUNTS = len(Builtin)

# Built-in ids that hold assets rather than account balances.
BUILTIN_ASSETS = (Builtin.FIAT, Builtin.SHADOW_FIAT)

# Holdings below this amount are treated as dust by the reporter.
AMOUNT_EPSILON = 1e-6

# Window used for the trailing spending/receiving sums.
TRAILING_MONTHS = 12

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# ============================================================================
# ENUMS
# ============================================================================

class TransactionKind(Enum):
    """
    Effect class of a single transaction.

    TRANSFER: fiat moves from one account to another.
    TRADE: an account pays amount * price for amount units of an asset.
    PRICE_UPDATE: the latest known price of an asset changes.
    """
    TRANSFER = "transfer"
    TRADE = "trade"
    PRICE_UPDATE = "price_update"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class HistoryClosed(LedgerError):
    """Raised when a frame is appended to a sealed or out-of-order History."""
    pass


class PaletteError(LedgerError):
    """Raised when a colour palette file cannot provide the requested colours."""
    pass


# ============================================================================
# DATES
# ============================================================================

_DATE_RE = re.compile(r"^(\d{4})([-/.])(\d{1,2})(?:\2(\d{1,2}))?$")


@dataclass(frozen=True, slots=True, order=True)
class Date:
    """
    Calendar date used as the ledger's date cursor.

    The default instance (year 0) is the sentinel carried by every line
    that precedes the first date line. It sorts before any real date.

    Attributes:
        year: Four-digit year, 0 for the sentinel.
        month: 1-12.
        day: 1-31.
    """
    year: int = 0
    month: int = 1
    day: int = 1

    @classmethod
    def parse(cls, token: str) -> Optional[Date]:
        """
        Parse a date token from ledger text.

        Accepts YYYY-MM-DD, YYYY/MM/DD, YYYY.MM.DD and YYYY-MM (day 1).

        Returns:
            The Date, or None if the token is not a valid calendar date.
        """
        m = _DATE_RE.match(token.strip())
        if m is None:
            return None
        year, month = int(m.group(1)), int(m.group(3))
        day = int(m.group(4)) if m.group(4) else 1
        try:
            _date(year, month, day)
        except ValueError:
            return None
        return cls(year, month, day)

    @property
    def is_set(self) -> bool:
        """False for the sentinel date."""
        return self.year > 0

    def same_month(self, other: Date) -> bool:
        return self.year == other.year and self.month == other.month

    def month_start(self) -> Date:
        return Date(self.year, self.month, 1)

    def next_month(self) -> Date:
        """First day of the following calendar month."""
        if self.month == 12:
            return Date(self.year + 1, 1, 1)
        return Date(self.year, self.month + 1, 1)

    def format(self, year_digits: int = 4, month_name: bool = True) -> str:
        """
        Short month label such as "Mar 24" or "03 2024".

        Args:
            year_digits: How many trailing digits of the year to show (0-4).
            month_name: Use a 3 letter month name instead of a number.
        """
        year_digits = min(max(year_digits, 0), 4)
        month = MONTH_NAMES[self.month - 1] if month_name else f"{self.month:02d}"
        if year_digits == 0:
            return month
        year = f"{self.year:04d}"[4 - year_digits:]
        return f"{month} {year}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


# ============================================================================
# TRANSACTIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A single effect produced by one ledger line.

    Attributes:
        date: Cursor date of the line that produced it.
        kind: TRANSFER, TRADE or PRICE_UPDATE.
        amount: Fiat moved (TRANSFER) or units bought (TRADE); 0 for PRICE_UPDATE.
        from_account: Debited account (TRANSFER) or paying account (TRADE).
        to_account: Credited account (TRANSFER only).
        asset: Asset id (TRADE and PRICE_UPDATE).
        price: Unit price (TRADE and PRICE_UPDATE).

    All fields are validated in __post_init__.
    """
    date: Date
    kind: TransactionKind
    amount: float = 0.0
    from_account: Optional[int] = None
    to_account: Optional[int] = None
    asset: Optional[int] = None
    price: Optional[float] = None

    def __post_init__(self):
        if not math.isfinite(self.amount):
            raise ValueError(f"Transaction amount must be finite, got {self.amount}")
        if self.price is not None and not math.isfinite(self.price):
            raise ValueError(f"Transaction price must be finite, got {self.price}")
        if self.kind is TransactionKind.TRANSFER:
            if self.from_account is None or self.to_account is None:
                raise ValueError("Transfer needs both from_account and to_account")
        elif self.kind is TransactionKind.TRADE:
            if self.asset is None or self.from_account is None or self.price is None:
                raise ValueError("Trade needs asset, paying account and price")
        elif self.kind is TransactionKind.PRICE_UPDATE:
            if self.asset is None or self.price is None:
                raise ValueError("Price update needs asset and price")

    @classmethod
    def transfer(cls, date: Date, amount: float, source: int, dest: int) -> Transaction:
        return cls(date, TransactionKind.TRANSFER, float(amount),
                   from_account=source, to_account=dest)

    @classmethod
    def trade(cls, date: Date, asset: int, amount: float, price: float,
              account: int) -> Transaction:
        return cls(date, TransactionKind.TRADE, float(amount),
                   from_account=account, asset=asset, price=float(price))

    @classmethod
    def price_update(cls, date: Date, asset: int, price: float) -> Transaction:
        return cls(date, TransactionKind.PRICE_UPDATE, asset=asset, price=float(price))

    def __repr__(self) -> str:
        if self.kind is TransactionKind.TRANSFER:
            return f"Transfer({self.date}: {self.amount} {self.from_account}→{self.to_account})"
        if self.kind is TransactionKind.TRADE:
            return (f"Trade({self.date}: {self.amount} of {self.asset} @ {self.price}"
                    f" paid by {self.from_account})")
        return f"PriceUpdate({self.date}: {self.asset} = {self.price})"


# ============================================================================
# ARITHMETIC
# ============================================================================

def ratio(numerator: float, denominator: float) -> float:
    """
    Divide with IEEE semantics: x/0 is +-inf and 0/0 is nan.

    Period totals are often zero (no income in a year, no holdings yet),
    and callers must keep going with a non-finite value instead of raising
    ZeroDivisionError.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))
