"""
engine.py - Balance bookkeeping and monthly history

LedgerState is the only mutable ledger state. update() and spending()
replay an ordered transaction list against it; spending() additionally
builds the monthly History used for trends and graphs.

Key responsibilities:
    - Apply the per-kind effect of every Transaction, in order
    - Restrict replays to a half-open date range when asked
    - Seal one PeriodFrame per calendar month, gaps included
    - Never reject a transaction: the parser already dropped bad input
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from typing import DefaultDict, Dict, Iterator, List, Optional, Sequence

from .core import (
    Builtin, BUILTIN_ASSETS, NR_BUILT_IN_ACCOUNTS, TRAILING_MONTHS,
    Date, Transaction, TransactionKind,
    HistoryClosed,
)
from .logging_setup import get_logger

logger = get_logger(__name__)


# ============================================================================
# LEDGER STATE
# ============================================================================

@dataclass
class LedgerState:
    """
    Running balances for one processing pass.

    Attributes:
        account_balances: Fiat balance per account id. Every built-in id is
            present from the start, even when zero.
        asset_amounts: Units held per asset id.
        asset_prices: Latest price per asset id. User assets are unpriced (0)
            until their first PriceUpdate or Trade; the built-in fiat assets
            are priced at 1.0.
    """
    account_balances: DefaultDict[int, float] = field(default_factory=lambda: defaultdict(float))
    asset_amounts: DefaultDict[int, float] = field(default_factory=lambda: defaultdict(float))
    asset_prices: DefaultDict[int, float] = field(default_factory=lambda: defaultdict(float))

    def __post_init__(self):
        for builtin_id in range(NR_BUILT_IN_ACCOUNTS):
            self.account_balances.setdefault(builtin_id, 0.0)
        for asset in BUILTIN_ASSETS:
            self.asset_amounts.setdefault(asset, 0.0)
            self.asset_prices.setdefault(asset, 1.0)

    def balance(self, account: int) -> float:
        """Balance of an account (0.0 if it never moved), without inserting it."""
        return self.account_balances.get(account, 0.0)

    def worth(self, asset: int) -> float:
        """Amount held times latest price."""
        return self.asset_amounts.get(asset, 0.0) * self.asset_prices.get(asset, 0.0)

    def user_balance_sum(self) -> float:
        """Sum of all non-built-in account balances."""
        return sum(v for k, v in self.account_balances.items() if k >= NR_BUILT_IN_ACCOUNTS)

    def copy(self) -> LedgerState:
        return LedgerState(
            defaultdict(float, self.account_balances),
            defaultdict(float, self.asset_amounts),
            defaultdict(float, self.asset_prices),
        )


# ============================================================================
# HISTORY
# ============================================================================

@dataclass
class PeriodFrame:
    """
    Metrics accumulated over one calendar month.

    Attributes:
        date: First day of the month this frame covers.
        spending: Total moved into the built-in spending account (refunds subtract).
        receiving: Total moved out of the built-in receiving account.
        flows: Net change per account id within the month.
        balances: Account balances at the moment the frame was sealed.
        worth: Asset worth (amount * price) at the moment the frame was sealed.
    """
    date: Date
    spending: float = 0.0
    receiving: float = 0.0
    flows: Dict[int, float] = field(default_factory=dict)
    balances: Dict[int, float] = field(default_factory=dict)
    worth: Dict[int, float] = field(default_factory=dict)

    def record(self, tx: Transaction) -> None:
        """Fold one transaction's flow metrics into the frame."""
        if tx.kind is TransactionKind.TRANSFER:
            self._flow(tx.from_account, -tx.amount)
            self._flow(tx.to_account, tx.amount)
            if tx.to_account == Builtin.SPENDING:
                self.spending += tx.amount
            if tx.from_account == Builtin.SPENDING:
                self.spending -= tx.amount
            if tx.from_account == Builtin.RECEIVING:
                self.receiving += tx.amount
            if tx.to_account == Builtin.RECEIVING:
                self.receiving -= tx.amount
        elif tx.kind is TransactionKind.TRADE:
            self._flow(tx.from_account, -tx.amount * tx.price)

    def _flow(self, account: int, amount: float) -> None:
        self.flows[account] = self.flows.get(account, 0.0) + amount

    def snapshot(self, state: LedgerState) -> None:
        """Copy end-of-month balances and asset worth out of ``state``."""
        self.balances = dict(state.account_balances)
        self.worth = {asset: state.worth(asset) for asset in state.asset_amounts}


class History:
    """
    Append-only monthly series of sealed PeriodFrames, oldest first.

    Frames must be appended in strictly increasing, contiguous month order.
    Once close() has been called the History is read-only.
    """

    def __init__(self):
        self._frames: List[PeriodFrame] = []
        self._closed = False

    def append(self, frame: PeriodFrame) -> None:
        """
        Seal a frame into the history.

        Raises:
            HistoryClosed: If the history is closed, or the frame does not
                cover the month right after the last sealed one.
        """
        if self._closed:
            raise HistoryClosed("History is closed")
        if self._frames:
            expected = self._frames[-1].date.next_month()
            if frame.date != expected:
                raise HistoryClosed(f"Expected frame for {expected}, got {frame.date}")
        self._frames.append(frame)

    def close(self) -> History:
        self._closed = True
        return self

    @property
    def closed(self) -> bool:
        return self._closed

    def trailing(self, months: int = TRAILING_MONTHS) -> List[PeriodFrame]:
        """The last ``months`` frames (fewer if the history is shorter)."""
        if months <= 0:
            return []
        return self._frames[-months:]

    def trailing_spending(self, months: int = TRAILING_MONTHS) -> float:
        return sum(frame.spending for frame in self.trailing(months))

    def trailing_receiving(self, months: int = TRAILING_MONTHS) -> float:
        return sum(frame.receiving for frame in self.trailing(months))

    def dates(self) -> List[Date]:
        return [frame.date for frame in self._frames]

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[PeriodFrame]:
        return iter(self._frames)

    def __getitem__(self, index):
        return self._frames[index]

    def __repr__(self) -> str:
        if not self._frames:
            return "History(empty)"
        return f"History({len(self._frames)} frames, {self._frames[0].date} .. {self._frames[-1].date})"


# ============================================================================
# REPLAY
# ============================================================================

def apply(tx: Transaction, state: LedgerState) -> None:
    """
    Apply a single transaction to ``state`` in place.

    Transfer: balance[from] -= amount, balance[to] += amount
    Trade: asset amount += amount, balance[payer] -= amount * price, price set
    PriceUpdate: price set
    """
    if tx.kind is TransactionKind.TRANSFER:
        state.account_balances[tx.from_account] -= tx.amount
        state.account_balances[tx.to_account] += tx.amount
    elif tx.kind is TransactionKind.TRADE:
        state.asset_amounts[tx.asset] += tx.amount
        state.account_balances[tx.from_account] -= tx.amount * tx.price
        state.asset_prices[tx.asset] = tx.price
    elif tx.kind is TransactionKind.PRICE_UPDATE:
        state.asset_prices[tx.asset] = tx.price
        state.asset_amounts.setdefault(tx.asset, 0.0)


def update(
    transactions: Sequence[Transaction],
    state: LedgerState,
    from_bound: Optional[Date] = None,
    to_bound: Optional[Date] = None,
) -> LedgerState:
    """
    Replay transactions against ``state`` in order.

    Args:
        transactions: Ordered transactions, as produced by the parser
        state: State to mutate
        from_bound: Inclusive lower date bound (unbounded if None)
        to_bound: Exclusive upper date bound (unbounded if None)

    Returns:
        ``state``, for chaining
    """
    applied = 0
    for tx in transactions:
        if from_bound is not None and tx.date < from_bound:
            continue
        if to_bound is not None and tx.date >= to_bound:
            continue
        apply(tx, state)
        applied += 1
    logger.debug("applied %d of %d transactions", applied, len(transactions))
    return state


def spending(transactions: Sequence[Transaction], state: LedgerState) -> History:
    """
    Replay transactions like update() while building the monthly History.

    Month handling:
        - The first frame opens at the month of the first dated transaction.
          Transactions carrying the sentinel date (before any date line)
          fold into that first frame.
        - Moving to a later month seals the open frame and opens zeroed
          frames for every month in between, so the series has no gaps.
        - A transaction dated before the open frame's month is folded into
          the open frame; history is never rewritten.
        - The open frame is sealed at end of input, even if partial.

    Args:
        transactions: Ordered transactions
        state: State to mutate

    Returns:
        The closed History (empty if there were no transactions)
    """
    history = History()
    frame: Optional[PeriodFrame] = None

    for tx in transactions:
        if frame is None:
            frame = PeriodFrame(tx.date.month_start())
        elif tx.date.is_set and not frame.date.is_set:
            frame.date = tx.date.month_start()
        elif tx.date.is_set and tx.date.month_start() > frame.date:
            target = tx.date.month_start()
            while frame.date < target:
                frame.snapshot(state)
                history.append(frame)
                frame = PeriodFrame(frame.date.next_month())
        apply(tx, state)
        frame.record(tx)

    if frame is not None:
        frame.snapshot(state)
        history.append(frame)
    logger.debug("built %r from %d transactions", history, len(transactions))
    return history.close()
