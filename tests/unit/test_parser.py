"""
test_parser.py - Unit tests for the line parser

Tests:
- Comments and blank lines
- Date lines and leading dates (cursor handling)
- Transfers, compound transfers, trades, price updates
- Malformed input: no transactions, no names, cursor untouched
- parse_ledger()/parse_text() over several lines
"""

import pytest

from networth import (
    Builtin, Date, NameBank, NR_BUILT_IN_ACCOUNTS, TransactionKind,
    ParseContext, parse_line, parse_ledger, parse_text,
)


@pytest.fixture
def ctx(names):
    """Context with the cursor on 2024-01-05."""
    return ParseContext(names, Date(2024, 1, 5))


class TestCommentsAndBlanks:

    @pytest.mark.parametrize("line", ["", "   ", "\n", "# a comment", "; another", "   # indented"])
    def test_no_effect(self, ctx, line):
        transactions, new_ctx = parse_line(line, ctx)
        assert transactions == []
        assert new_ctx == ctx
        assert len(ctx.names) == NR_BUILT_IN_ACCOUNTS

    def test_trailing_comment_stripped(self, ctx):
        transactions, _ = parse_line("checking > spending 5 # lunch", ctx)
        assert len(transactions) == 1
        assert transactions[0].amount == 5.0


class TestDateLines:

    def test_date_line_sets_cursor(self, ctx):
        transactions, new_ctx = parse_line("2024-03-01", ctx)
        assert transactions == []
        assert new_ctx.date == Date(2024, 3, 1)
        assert new_ctx.names is ctx.names

    def test_date_line_does_not_mutate_old_context(self, ctx):
        parse_line("2024-03-01", ctx)
        assert ctx.date == Date(2024, 1, 5)

    def test_leading_date_applies_to_entry(self, ctx):
        transactions, new_ctx = parse_line("2024-02-10 checking > spending 30", ctx)
        assert transactions[0].date == Date(2024, 2, 10)
        assert new_ctx.date == Date(2024, 2, 10)

    def test_cursor_inherited(self, ctx):
        transactions, new_ctx = parse_line("checking > spending 30", ctx)
        assert transactions[0].date == Date(2024, 1, 5)
        assert new_ctx.date == Date(2024, 1, 5)

    def test_invalid_date_line_skipped(self, ctx):
        transactions, new_ctx = parse_line("2024-13-01 checking > spending 30", ctx)
        assert transactions == []
        assert new_ctx == ctx
        assert "checking" not in ctx.names

    def test_sentinel_before_first_date(self, names):
        transactions, _ = parse_line("checking > spending 1", ParseContext(names))
        assert not transactions[0].date.is_set


class TestTransfers:

    def test_simple_transfer(self, ctx):
        transactions, _ = parse_line("checking > spending 42.5", ctx)
        assert len(transactions) == 1
        tx = transactions[0]
        assert tx.kind is TransactionKind.TRANSFER
        assert tx.from_account == ctx.names.lookup("checking")
        assert tx.to_account == Builtin.SPENDING
        assert tx.amount == 42.5

    def test_compound_transfer_in_leg_order(self, ctx):
        transactions, _ = parse_line("checking > rent 800, food 120.5, spending 3", ctx)
        assert [t.to_account for t in transactions] == [
            ctx.names.lookup("rent"), ctx.names.lookup("food"), Builtin.SPENDING,
        ]
        assert [t.amount for t in transactions] == [800.0, 120.5, 3.0]
        assert all(t.from_account == ctx.names.lookup("checking") for t in transactions)
        assert all(t.date == ctx.date for t in transactions)

    def test_names_registered_in_first_seen_order(self, ctx):
        parse_line("checking > rent 800, food 120", ctx)
        assert ctx.names.lookup("checking") == NR_BUILT_IN_ACCOUNTS
        assert ctx.names.lookup("rent") == NR_BUILT_IN_ACCOUNTS + 1
        assert ctx.names.lookup("food") == NR_BUILT_IN_ACCOUNTS + 2

    def test_negative_amount(self, ctx):
        transactions, _ = parse_line("checking > spending -5", ctx)
        assert transactions[0].amount == -5.0

    def test_tabs_and_extra_spaces(self, ctx):
        transactions, _ = parse_line("\tchecking   >   spending\t7 ", ctx)
        assert transactions[0].amount == 7.0


class TestTrades:

    def test_trade(self, ctx):
        transactions, _ = parse_line("broker > ACME 10 @ 12.5", ctx)
        tx = transactions[0]
        assert tx.kind is TransactionKind.TRADE
        assert tx.asset == ctx.names.lookup("ACME")
        assert tx.from_account == ctx.names.lookup("broker")
        assert (tx.amount, tx.price) == (10.0, 12.5)

    def test_trade_and_transfer_legs(self, ctx):
        transactions, _ = parse_line("broker > ACME 2 @ 100, fees 1.5", ctx)
        assert [t.kind for t in transactions] == [TransactionKind.TRADE, TransactionKind.TRANSFER]

    def test_trade_missing_price(self, ctx):
        transactions, _ = parse_line("broker > ACME 10 @", ctx)
        assert transactions == []


class TestPriceUpdates:

    def test_single(self, ctx):
        transactions, _ = parse_line("ACME = 13.1", ctx)
        tx = transactions[0]
        assert tx.kind is TransactionKind.PRICE_UPDATE
        assert tx.asset == ctx.names.lookup("ACME")
        assert tx.price == 13.1

    def test_multiple(self, ctx):
        transactions, _ = parse_line("ACME = 13.1, FOO = 2", ctx)
        assert [t.price for t in transactions] == [13.1, 2.0]

    def test_with_leading_date(self, ctx):
        transactions, new_ctx = parse_line("2024-06-30 ACME = 14", ctx)
        assert transactions[0].date == Date(2024, 6, 30)
        assert new_ctx.date == Date(2024, 6, 30)


class TestMalformed:
    """Malformed lines have no effect at all."""

    @pytest.mark.parametrize("line", [
        "checking > spending abc",
        "checking > spending",
        "checking >",
        "> spending 5",
        "checking spending 5",
        "5 > spending 3",
        "checking > 2024-01-01 3",
        "checking > spending 5, food",
        "checking > spending 5 = 3",
        "ACME = ",
        "ACME = 1, FOO",
        "ACME = 1 = 2",
        "a > b > c 5",
        "just words",
    ])
    def test_no_transactions_no_names(self, ctx, line):
        transactions, new_ctx = parse_line(line, ctx)
        assert transactions == []
        assert new_ctx == ctx
        assert list(ctx.names.user_ids()) == []

    def test_leading_date_then_garbage_keeps_cursor(self, ctx):
        transactions, new_ctx = parse_line("2024-09-01 garbage here", ctx)
        assert transactions == []
        assert new_ctx.date == Date(2024, 1, 5)

    @pytest.mark.parametrize("line", [
        "checking > spending " + "9" * 400,
        "ACME = 1" + "0" * 400,
        "broker > ACME 1 @ " + "9" * 400,
        "broker > ACME " + "9" * 400 + " @ 2",
    ])
    def test_oversized_number(self, ctx, line):
        """A numeral past the float range is malformed, not an error."""
        transactions, new_ctx = parse_line(line, ctx)
        assert transactions == []
        assert new_ctx == ctx
        assert list(ctx.names.user_ids()) == []

    def test_oversized_number_does_not_stop_the_ledger(self):
        transactions, names = parse_text(
            "2024-01-05\nchecking > spending " + "9" * 400 + "\nchecking > spending 5\n"
        )
        assert len(transactions) == 1
        assert transactions[0].amount == 5.0


class TestParseLedger:

    def test_concatenates_in_line_order(self):
        transactions, names = parse_ledger([
            "2024-01-05",
            "checking > spending 50",
            "not a transaction",
            "2024-02-10 checking > spending 30, rent 700",
        ])
        assert [t.amount for t in transactions] == [50.0, 30.0, 700.0]
        assert [t.date for t in transactions] == [
            Date(2024, 1, 5), Date(2024, 2, 10), Date(2024, 2, 10),
        ]
        assert names.lookup("rent") is not None

    def test_extends_given_namebank(self, names):
        names.register("savings")
        _, returned = parse_ledger(["checking > savings 1"], names)
        assert returned is names
        assert names.lookup("checking") == NR_BUILT_IN_ACCOUNTS + 1

    def test_parse_text(self, two_month_text):
        transactions, names = parse_text(two_month_text)
        assert len(transactions) == 2
        assert all(t.to_account == Builtin.SPENDING for t in transactions)

    def test_empty_text(self):
        transactions, names = parse_text("")
        assert transactions == []
        assert len(names) == NR_BUILT_IN_ACCOUNTS
