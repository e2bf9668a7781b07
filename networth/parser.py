"""
parser.py - Ledger line parser

Turns one line of ledger text into zero or more Transactions. The only
state carried from line to line is the ParseContext: the shared NameBank and
the date cursor.

Line grammar:

    # comment                       ; also a comment
    2024-01-05                      set the date cursor
    2024-01-05 checking > rent 800  set the cursor, then parse the entry
    checking > spending 42.5        Transfer checking -> spending
    checking > rent 800, food 120   compound Transfer, one per leg
    broker > ACME 10 @ 12.5         Trade: broker pays 125 for 10 ACME
    ACME = 13.1, FOO = 2            PriceUpdate per leg

A malformed line produces no transactions, registers no names and leaves
the cursor where it was.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import math
import re
from typing import Iterable, List, Optional, Tuple

from .core import Date, Transaction
from .logging_setup import get_logger
from .names import NameBank

logger = get_logger(__name__)

COMMENT_MARKERS = ("#", ";")
TRANSFER_OP = ">"
PRICE_OP = "="
TRADE_OP = "@"
LEG_SEPARATOR = ","

_NUMBER_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)$")
_NAME_RE = re.compile(r"^[^\s>=@,#;]+$")
_DATE_LIKE_RE = re.compile(r"^\d{4}[-/.]\d")


@dataclass(frozen=True, slots=True)
class ParseContext:
    """
    Context threaded through every parse_line() call.

    Attributes:
        names: NameBank shared by the whole run (mutated in place).
        date: Current date cursor; replaced only by date-setting lines.
    """
    names: NameBank
    date: Date = Date()


# ============================================================================
# TOKEN HELPERS
# ============================================================================

def _strip_comment(line: str) -> str:
    cut = len(line)
    for marker in COMMENT_MARKERS:
        pos = line.find(marker)
        if pos >= 0:
            cut = min(cut, pos)
    return line[:cut].strip()


def _number(token: str) -> Optional[float]:
    token = token.strip()
    if not _NUMBER_RE.match(token):
        return None
    value = float(token)
    if not math.isfinite(value):
        return None
    return value


def _name(token: str) -> Optional[str]:
    token = token.strip()
    if not _NAME_RE.match(token):
        return None
    if _NUMBER_RE.match(token) or Date.parse(token) is not None:
        return None
    return token


# A leg before name registration: (dest_or_asset, amount, price)
_Leg = Tuple[str, float, Optional[float]]


def _split_flow_leg(text: str) -> Optional[_Leg]:
    """Parse ``NAME AMOUNT`` or ``NAME AMOUNT @ PRICE``."""
    price: Optional[float] = None
    if TRADE_OP in text:
        text, price_text = text.split(TRADE_OP, 1)
        price = _number(price_text)
        if price is None:
            return None
    parts = text.split()
    if len(parts) != 2:
        return None
    name, amount = _name(parts[0]), _number(parts[1])
    if name is None or amount is None:
        return None
    return name, amount, price


def _parse_flow(body: str) -> Optional[Tuple[str, List[_Leg]]]:
    """Parse ``SOURCE > leg[, leg ...]``."""
    source_text, rest = body.split(TRANSFER_OP, 1)
    source = _name(source_text)
    if source is None:
        return None
    legs: List[_Leg] = []
    for leg_text in rest.split(LEG_SEPARATOR):
        leg = _split_flow_leg(leg_text)
        if leg is None:
            return None
        legs.append(leg)
    return source, legs


def _parse_prices(body: str) -> Optional[List[Tuple[str, float]]]:
    """Parse ``ASSET = PRICE[, ASSET = PRICE ...]``."""
    records = []
    for leg_text in body.split(LEG_SEPARATOR):
        if leg_text.count(PRICE_OP) != 1:
            return None
        name_text, price_text = leg_text.split(PRICE_OP)
        name, price = _name(name_text), _number(price_text)
        if name is None or price is None:
            return None
        records.append((name, price))
    return records


# ============================================================================
# LINE PARSING
# ============================================================================

def _parse_entry(body: str, ctx: ParseContext) -> Optional[List[Transaction]]:
    """
    Parse the part of a line after an optional leading date.

    Names are registered only once the whole entry is known to be valid.
    """
    names, date = ctx.names, ctx.date
    if TRANSFER_OP in body:
        if PRICE_OP in body:
            return None
        flow = _parse_flow(body)
        if flow is None:
            return None
        source_name, legs = flow
        source = names.register(source_name)
        transactions = []
        for dest_name, amount, price in legs:
            dest = names.register(dest_name)
            if price is None:
                transactions.append(Transaction.transfer(date, amount, source, dest))
            else:
                transactions.append(Transaction.trade(date, dest, amount, price, source))
        return transactions
    if PRICE_OP in body:
        records = _parse_prices(body)
        if records is None:
            return None
        return [
            Transaction.price_update(date, names.register(asset), price)
            for asset, price in records
        ]
    return None


def parse_line(line: str, ctx: ParseContext) -> Tuple[List[Transaction], ParseContext]:
    """
    Parse one ledger line.

    Args:
        line: Raw text of the line (newline optional)
        ctx: Context after the previous line

    Returns:
        (transactions, context for the next line). Transactions are in leg
        order and all carry the context's date.
    """
    body = _strip_comment(line)
    if not body:
        return [], ctx

    head, *tail = body.split(None, 1)
    new_date = Date.parse(head)
    if new_date is not None:
        body = tail[0].strip() if tail else ""
        entry_ctx = replace(ctx, date=new_date)
        if not body:
            return [], entry_ctx
    elif _DATE_LIKE_RE.match(head):
        logger.debug("skipping line with invalid date %r", head)
        return [], ctx
    else:
        entry_ctx = ctx

    transactions = _parse_entry(body, entry_ctx)
    if transactions is None:
        logger.debug("skipping malformed line %r", line.rstrip("\n"))
        return [], ctx
    return transactions, entry_ctx


def parse_ledger(
    lines: Iterable[str],
    names: Optional[NameBank] = None,
) -> Tuple[List[Transaction], NameBank]:
    """
    Parse a whole ledger, in line order, into one transaction list.

    Args:
        lines: Ledger text already split into lines
        names: NameBank to extend (a fresh one is created if omitted)

    Returns:
        (all transactions in emitted order, the NameBank)
    """
    ctx = ParseContext(names if names is not None else NameBank())
    transactions: List[Transaction] = []
    skipped = 0
    for line in lines:
        parsed, next_ctx = parse_line(line, ctx)
        if not parsed and next_ctx is ctx and _strip_comment(line):
            skipped += 1
        transactions.extend(parsed)
        ctx = next_ctx
    logger.debug("parsed %d transactions, skipped %d lines", len(transactions), skipped)
    return transactions, ctx.names


def parse_text(text: str, names: Optional[NameBank] = None) -> Tuple[List[Transaction], NameBank]:
    """Split ``text`` on newlines and parse it with parse_ledger()."""
    return parse_ledger(text.split("\n"), names)

