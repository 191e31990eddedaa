"""Tests for balance-sheet grouping and the report queries that feed it."""
from datetime import date
from decimal import Decimal

import pytest

from conftest import TENANT
from crud import app_config as crud_app_config
from crud import financial_reports
from crud import voucher as voucher_crud
from models.ledger_account import AccountType
from models.voucher import VoucherType
from schemas.financial_reports import BalanceSheetConfig, BalanceSheetGroupConfig, BalanceSheetItem
from utils.balance_sheet import (
    DEFAULT_BALANCE_SHEET_CONFIG,
    OTHER_ITEMS,
    build_balance_sheet,
    categorize_items,
    match_group,
)


def _item(name, amount):
    return BalanceSheetItem(ledger_name=name, amount=Decimal(amount))


BANK_ONLY = BalanceSheetConfig(
    liability_groups=[],
    asset_groups=[BalanceSheetGroupConfig(group_name="Bank Accounts", keywords=["bank"])],
)


def test_keyword_match_and_other_items():
    groups = categorize_items(
        [_item("Union Bank A/c", "1200.00"), _item("Miscellaneous XYZ", "30.00")],
        BANK_ONLY.asset_groups,
    )
    assert [(g.group_name, [i.ledger_name for i in g.items]) for g in groups] == [
        ("Bank Accounts", ["Union Bank A/c"]),
        (OTHER_ITEMS, ["Miscellaneous XYZ"]),
    ]
    assert groups[0].total == Decimal("1200.00")


def test_first_matching_group_wins():
    # "Cash at Union Bank" matches both Cash and Bank Accounts; Cash is declared first
    assert match_group("Cash at Union Bank", DEFAULT_BALANCE_SHEET_CONFIG.asset_groups) == "Cash"
    assert match_group("MILMA Share", DEFAULT_BALANCE_SHEET_CONFIG.asset_groups) == "Share in Other Institutions"
    assert match_group("Department Grant 2023", DEFAULT_BALANCE_SHEET_CONFIG.liability_groups) == "Grants and Subsidies"


def test_empty_groups_are_left_out():
    groups = categorize_items([_item("Cash in Hand", "10.00")], DEFAULT_BALANCE_SHEET_CONFIG.asset_groups)
    assert [g.group_name for g in groups] == ["Cash"]


def test_categorization_is_idempotent():
    liabilities = [_item("Milk Value Payable", "400.00"), _item("Kerala Dairy Grant", "100.00")]
    assets = [_item("Cash", "250.00"), _item("Cattle Feed Stock", "250.00"), _item("Tea Shop", "0.50")]

    first = build_balance_sheet(liabilities, assets, net_profit=Decimal("0.50"))
    second = build_balance_sheet(liabilities, assets, net_profit=Decimal("0.50"))
    assert first.model_dump() == second.model_dump()


def test_totals_include_net_profit_and_tally():
    sheet = build_balance_sheet(
        [_item("Producers Dues", "300.00")],
        [_item("Cash", "350.00"), _item("Furniture", "150.00")],
        net_profit=Decimal("200.00"),
        as_on_date=date(2024, 3, 31),
    )
    assert sheet.liabilities.total == Decimal("300.00")
    assert sheet.total_liabilities_side == Decimal("500.00")
    assert sheet.total_assets_side == Decimal("500.00")
    assert sheet.imbalance == Decimal("0.00")
    assert sheet.is_balanced
    assert sheet.warning is None


def test_imbalance_is_flagged_not_fixed():
    sheet = build_balance_sheet([_item("Producers Dues", "100.00")], [_item("Cash", "90.00")])
    assert not sheet.is_balanced
    assert sheet.imbalance == Decimal("10.00")
    assert "10.00" in sheet.warning
    assert sheet.total_assets_side == Decimal("90.00")


def test_difference_within_tolerance_is_balanced():
    sheet = build_balance_sheet([_item("Producers Dues", "100.01")], [_item("Cash", "100.00")])
    assert sheet.is_balanced
    assert sheet.imbalance == Decimal("0.01")


def test_config_rejects_blank_keywords():
    with pytest.raises(ValueError):
        BalanceSheetGroupConfig(group_name="Bank", keywords=["bank", "  "])


def test_config_rejects_repeated_group_names():
    with pytest.raises(ValueError):
        BalanceSheetConfig(liability_groups=[], asset_groups=[
            BalanceSheetGroupConfig(group_name="Bank", keywords=["bank"]),
            BalanceSheetGroupConfig(group_name="bank", keywords=["sbi"]),
        ])


def test_repeated_group_name_is_counted_once():
    groups = [
        BalanceSheetGroupConfig(group_name="Bank", keywords=["bank"]),
        BalanceSheetGroupConfig(group_name="Bank", keywords=["sbi"]),
    ]
    sheet = build_balance_sheet([], [_item("Union Bank", "100.00")],
                                config=BalanceSheetConfig.model_construct(liability_groups=[], asset_groups=groups))
    assert [(g.group_name, g.total) for g in sheet.assets.groups] == [("Bank", Decimal("100.00"))]
    assert sheet.total_assets_side == Decimal("100.00")


@pytest.fixture()
def books(db, make_ledger):
    cash = make_ledger("Cash", AccountType.CASH, opening_balance="1000.00")
    capital = make_ledger("Share Capital", AccountType.SHARE_CAPITAL, opening_balance="1000.00")
    sales = make_ledger("Milk Sales", AccountType.SALES)
    power = make_ledger("Electricity", AccountType.EXPENSE)
    bank = make_ledger("Union Bank A/c", AccountType.BANK)

    def post(debit, credit, amount, on):
        return voucher_crud.create_voucher(db, TENANT, VoucherType.JOURNAL, on, [
            {"ledger_id": debit.id, "debit_amount": Decimal(amount)},
            {"ledger_id": credit.id, "credit_amount": Decimal(amount)},
        ])

    post(cash, sales, "500.00", date(2024, 4, 1))
    post(power, cash, "200.00", date(2024, 4, 20))
    post(bank, cash, "300.00", date(2024, 5, 2))
    return cash, capital, sales, power, bank


def test_profit_and_loss(db, books):
    pnl = financial_reports.get_profit_and_loss(db, TENANT)
    assert pnl.total_income == Decimal("500.00")
    assert pnl.total_expense == Decimal("200.00")
    assert pnl.net_profit == Decimal("300.00")


def test_trial_balance_agrees(db, books):
    trial = financial_reports.get_trial_balance(db, TENANT)
    assert trial.total_debit == trial.total_credit == Decimal("1500.00")
    assert trial.difference == Decimal("0.00")
    assert [r.ledger_name for r in trial.records] == [
        "Cash", "Union Bank A/c", "Share Capital", "Milk Sales", "Electricity"
    ]


def test_balance_sheet_from_current_balances(db, books):
    sheet = financial_reports.get_balance_sheet(db, TENANT)

    assets = {g.group_name: g.total for g in sheet.assets.groups}
    assert assets == {"Cash": Decimal("1000.00"), "Bank Accounts": Decimal("300.00")}
    assert [g.group_name for g in sheet.liabilities.groups] == [OTHER_ITEMS]
    assert sheet.liabilities.total == Decimal("1000.00")
    assert sheet.net_profit == Decimal("300.00")
    assert sheet.total_liabilities_side == sheet.total_assets_side == Decimal("1300.00")
    assert sheet.is_balanced


def test_balance_sheet_as_on_date_replays_history(db, books):
    sheet = financial_reports.get_balance_sheet(db, TENANT, as_on_date=date(2024, 4, 30))

    assets = {g.group_name: g.total for g in sheet.assets.groups}
    assert assets == {"Cash": Decimal("1300.00")}
    assert sheet.net_profit == Decimal("300.00")
    assert sheet.as_on_date == date(2024, 4, 30)
    assert sheet.is_balanced

    before_any = financial_reports.get_balance_sheet(db, TENANT, as_on_date=date(2024, 3, 31))
    assert before_any.net_profit == Decimal("0.00")
    assert before_any.total_assets_side == Decimal("1000.00")


def test_void_vouchers_do_not_count_as_on_date(db, books):
    cash, _, sales, _, _ = books
    extra = voucher_crud.create_voucher(db, TENANT, VoucherType.RECEIPT, date(2024, 4, 2), [
        {"ledger_id": cash.id, "debit_amount": Decimal("75.00")},
        {"ledger_id": sales.id, "credit_amount": Decimal("75.00")},
    ])
    voucher_crud.delete_voucher(db, extra.id, TENANT)

    dated = financial_reports.get_balance_sheet(db, TENANT, as_on_date=date(2024, 12, 31))
    current = financial_reports.get_balance_sheet(db, TENANT)
    assert dated.total_assets_side == current.total_assets_side == Decimal("1300.00")


def test_unbalanced_openings_show_up_as_imbalance(db, make_ledger):
    make_ledger("Cash", AccountType.CASH, opening_balance="100.00")
    sheet = financial_reports.get_balance_sheet(db, TENANT)
    assert not sheet.is_balanced
    assert sheet.imbalance == Decimal("-100.00")


def test_stored_group_table_is_used(db, books):
    crud_app_config.set_balance_sheet_config(db, TENANT, BANK_ONLY)
    assert crud_app_config.get_balance_sheet_config(db, TENANT) == BANK_ONLY

    sheet = financial_reports.get_balance_sheet(db, TENANT)
    assert [g.group_name for g in sheet.assets.groups] == ["Bank Accounts", OTHER_ITEMS]


def test_inline_group_table_overrides_stored(db, books):
    inline = BalanceSheetConfig(
        liability_groups=[BalanceSheetGroupConfig(group_name="Share Capital", keywords=["share"])],
        asset_groups=[],
    )
    sheet = financial_reports.get_balance_sheet(db, TENANT, config=inline)
    assert [g.group_name for g in sheet.liabilities.groups] == ["Share Capital"]
    assert [g.group_name for g in sheet.assets.groups] == [OTHER_ITEMS]


def test_default_group_table_when_nothing_stored(db):
    assert crud_app_config.get_balance_sheet_config(db, TENANT) == DEFAULT_BALANCE_SHEET_CONFIG
