"""Tests for ledger statement replay."""
from datetime import date
from decimal import Decimal

import pytest

from conftest import TENANT
from crud import ledger_account as ledger_crud
from crud import voucher as voucher_crud
from crud.ledger_statement import get_statement
from models.ledger_account import AccountType, BalanceSide
from models.voucher import VoucherType
from schemas.ledger_account import LedgerAccountUpdate
from utils.exceptions import NotFoundError, ValidationError


def _journal(db, debit, credit, amount, on):
    return voucher_crud.create_voucher(db, TENANT, VoucherType.JOURNAL, on, [
        {"ledger_id": debit.id, "debit_amount": Decimal(amount)},
        {"ledger_id": credit.id, "credit_amount": Decimal(amount)},
    ], narration=f"{debit.name} / {credit.name}")


@pytest.fixture()
def history(db, make_ledger):
    cash = make_ledger("Cash", AccountType.CASH, opening_balance="100.00")
    sales = make_ledger("Milk Sales", AccountType.SALES)
    power = make_ledger("Electricity", AccountType.EXPENSE)

    _journal(db, cash, sales, "500.00", date(2024, 4, 1))
    _journal(db, power, cash, "800.00", date(2024, 4, 5))
    _journal(db, cash, sales, "50.25", date(2024, 4, 10))
    return cash, sales, power


def test_statement_replays_to_current_balance(db, history):
    cash, _, _ = history
    statement = get_statement(db, cash.id, TENANT)

    assert statement.opening_balance == Decimal("100.00")
    assert statement.opening_balance_side == BalanceSide.DR
    assert [(row.debit, row.credit) for row in statement.entries] == [
        (Decimal("500.00"), Decimal("0.00")),
        (Decimal("0.00"), Decimal("800.00")),
        (Decimal("50.25"), Decimal("0.00")),
    ]
    assert [(row.running_balance, row.running_balance_side) for row in statement.entries] == [
        (Decimal("600.00"), BalanceSide.DR),
        (Decimal("200.00"), BalanceSide.CR),
        (Decimal("149.75"), BalanceSide.CR),
    ]
    assert statement.closing_balance == cash.current_balance == Decimal("149.75")
    assert statement.closing_balance_side == cash.current_balance_side == BalanceSide.CR
    assert statement.sum_debit == Decimal("550.25")
    assert statement.sum_credit == Decimal("800.00")


def test_date_window_does_not_rebaseline(db, history):
    cash, _, _ = history
    statement = get_statement(db, cash.id, TENANT, from_date=date(2024, 4, 5), to_date=date(2024, 4, 5))

    assert len(statement.entries) == 1
    # Carries the 4/1 receipt into the window opening
    assert statement.opening_balance == Decimal("600.00")
    assert statement.opening_balance_side == BalanceSide.DR
    row = statement.entries[0]
    assert row.running_balance == Decimal("200.00")
    assert row.running_balance_side == BalanceSide.CR
    assert statement.sum_debit == Decimal("0.00")
    assert statement.sum_credit == Decimal("800.00")
    assert statement.closing_balance == Decimal("200.00")


def test_window_boundaries_are_inclusive(db, history):
    cash, _, _ = history
    statement = get_statement(db, cash.id, TENANT, from_date=date(2024, 4, 1), to_date=date(2024, 4, 10))
    assert len(statement.entries) == 3


def test_particulars_name_the_counter_ledger_as_posted(db, history):
    cash, sales, _ = history
    ledger_crud.update_ledger(db, sales.id, TENANT, LedgerAccountUpdate(name="Milk Sales A/c"))

    statement = get_statement(db, cash.id, TENANT)
    assert [row.particulars for row in statement.entries] == ["Milk Sales", "Electricity", "Milk Sales"]
    assert statement.entries[0].narration == "Cash / Milk Sales"


def test_void_vouchers_drop_out_of_the_statement(db, history):
    cash, sales, _ = history
    extra = _journal(db, cash, sales, "10.00", date(2024, 4, 2))
    voucher_crud.delete_voucher(db, extra.id, TENANT)

    statement = get_statement(db, cash.id, TENANT)
    assert extra.id not in [row.voucher_id for row in statement.entries]
    assert statement.closing_balance == cash.current_balance


def test_same_day_rows_follow_posting_order(db, make_ledger):
    cash = make_ledger("Cash", AccountType.CASH)
    sales = make_ledger("Sales", AccountType.SALES)
    first = _journal(db, cash, sales, "1.00", date(2024, 4, 1))
    second = _journal(db, sales, cash, "0.50", date(2024, 4, 1))

    statement = get_statement(db, cash.id, TENANT)
    assert [row.voucher_id for row in statement.entries] == [first.id, second.id]
    assert statement.entries[-1].running_balance == Decimal("0.50")


def test_multi_leg_particulars_list_every_counter_ledger(db, make_ledger):
    cash = make_ledger("Cash", AccountType.CASH)
    milk = make_ledger("Milk Sales", AccountType.SALES)
    feed = make_ledger("Feed Sales", AccountType.SALES)
    voucher_crud.create_voucher(db, TENANT, VoucherType.RECEIPT, date(2024, 4, 1), [
        {"ledger_id": cash.id, "debit_amount": Decimal("30.00")},
        {"ledger_id": milk.id, "credit_amount": Decimal("20.00")},
        {"ledger_id": feed.id, "credit_amount": Decimal("10.00")},
    ])

    assert get_statement(db, cash.id, TENANT).entries[0].particulars == "Milk Sales, Feed Sales"
    assert get_statement(db, milk.id, TENANT).entries[0].particulars == "Cash"


def test_statement_of_untouched_ledger(db, make_ledger):
    ledger = make_ledger("Share Capital", AccountType.SHARE_CAPITAL, opening_balance="1000.00")
    statement = get_statement(db, ledger.id, TENANT)
    assert statement.entries == []
    assert statement.closing_balance == Decimal("1000.00")
    assert statement.closing_balance_side == BalanceSide.CR


def test_inverted_window_is_rejected(db, history):
    cash, _, _ = history
    with pytest.raises(ValidationError):
        get_statement(db, cash.id, TENANT, from_date=date(2024, 5, 1), to_date=date(2024, 4, 1))


def test_statement_for_unknown_ledger(db):
    with pytest.raises(NotFoundError):
        get_statement(db, 1, TENANT)
