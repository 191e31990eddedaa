"""
Balance-sheet grouping.

Groups are an ordered table of (group name, keywords). Each item goes to the
first group with a keyword contained in its lowercased ledger name; anything
unmatched lands in a trailing "Other Items" group. Because the first match
wins, the order of the table decides precedence for names that match more
than one group.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from schemas.financial_reports import (
    BalanceSheet,
    BalanceSheetConfig,
    BalanceSheetGroup,
    BalanceSheetGroupConfig,
    BalanceSheetItem,
    BalanceSheetSide,
)
from utils.money import TWO_PLACES

logger = logging.getLogger("reports")

OTHER_ITEMS = "Other Items"

DEFAULT_BALANCE_SHEET_CONFIG = BalanceSheetConfig(
    liability_groups=[
        BalanceSheetGroupConfig(group_name="Grants and Subsidies", keywords=["grant", "subsidy", "department grant"]),
        BalanceSheetGroupConfig(group_name="Advance Due by Society", keywords=[
            "milk value", "addl price", "producers dues", "kdf welfare",
            "minerals factory", "silage factory", "advance due by",
        ]),
        BalanceSheetGroupConfig(group_name="Profit", keywords=["net profit", "profit brought", "p&l"]),
    ],
    asset_groups=[
        BalanceSheetGroupConfig(group_name="Cash", keywords=["cash in hand", "cash"]),
        BalanceSheetGroupConfig(group_name="Bank Accounts", keywords=[
            "bank", "union bank", "kottakal", "co-operative bank", "cooperative bank", "a/c",
        ]),
        BalanceSheetGroupConfig(group_name="Share in Other Institutions", keywords=["share in", "milma", "share"]),
        BalanceSheetGroupConfig(group_name="Interest Receivable", keywords=["interest receivable", "interest received"]),
        BalanceSheetGroupConfig(group_name="Fixed Assets - Movables", keywords=[
            "furniture", "equipment", "fixed asset", "movable",
        ]),
        BalanceSheetGroupConfig(group_name="Advance Due to Society", keywords=[
            "am lps", "amlp", "lps kuttippuram", "lp school", "minerals subsidy",
            "silage subsidy", "advance due to",
        ]),
        BalanceSheetGroupConfig(group_name="Closing Stock", keywords=["cattle feed", "minerals", "closing stock", "stock"]),
    ],
)


def match_group(ledger_name: str, groups: Iterable[BalanceSheetGroupConfig]) -> str:
    name = (ledger_name or "").lower()
    for group in groups:
        if any(keyword.lower() in name for keyword in group.keywords):
            return group.group_name
    return OTHER_ITEMS


def categorize_items(items: Iterable[BalanceSheetItem], groups: List[BalanceSheetGroupConfig]) -> List[BalanceSheetGroup]:
    """Bucket items into groups, keeping the configured group order and the item order within each group."""
    buckets = {group.group_name: [] for group in groups}
    buckets[OTHER_ITEMS] = buckets.get(OTHER_ITEMS, [])
    for item in items:
        buckets[match_group(item.ledger_name, groups)].append(item)

    ordered_names = list(dict.fromkeys(group.group_name for group in groups))
    if OTHER_ITEMS not in ordered_names:
        ordered_names.append(OTHER_ITEMS)

    result = []
    for group_name in ordered_names:
        members = buckets[group_name]
        if not members:
            continue
        total = sum((member.amount for member in members), Decimal("0.00"))
        result.append(BalanceSheetGroup(group_name=group_name, items=members, total=total.quantize(TWO_PLACES)))
    return result


def _side(items: Iterable[BalanceSheetItem], groups: List[BalanceSheetGroupConfig]) -> BalanceSheetSide:
    side_groups = categorize_items(items, groups)
    total = sum((group.total for group in side_groups), Decimal("0.00"))
    return BalanceSheetSide(groups=side_groups, total=total.quantize(TWO_PLACES))


def build_balance_sheet(
    liabilities_items: Iterable[BalanceSheetItem],
    assets_items: Iterable[BalanceSheetItem],
    config: Optional[BalanceSheetConfig] = None,
    net_profit: Decimal = Decimal("0.00"),
    tolerance: Decimal = Decimal("0.01"),
    as_on_date: Optional[date] = None,
) -> BalanceSheet:
    """Group both sides and compare their totals.

    `net_profit` is added to the liabilities side as is. An imbalance above
    `tolerance` is reported on the result, never corrected.
    """
    config = config or DEFAULT_BALANCE_SHEET_CONFIG
    liabilities = _side(liabilities_items, config.liability_groups)
    assets = _side(assets_items, config.asset_groups)

    net_profit = Decimal(net_profit).quantize(TWO_PLACES)
    total_liabilities_side = (liabilities.total + net_profit).quantize(TWO_PLACES)
    total_assets_side = assets.total
    imbalance = (total_liabilities_side - total_assets_side).quantize(TWO_PLACES)
    is_balanced = abs(imbalance) <= tolerance

    warning = None
    if not is_balanced:
        warning = (
            f"Balance sheet does not tally: liabilities side {total_liabilities_side}, "
            f"assets side {total_assets_side}, difference {imbalance}"
        )
        logger.warning(warning)

    return BalanceSheet(
        as_on_date=as_on_date,
        liabilities=liabilities,
        assets=assets,
        net_profit=net_profit,
        total_liabilities_side=total_liabilities_side,
        total_assets_side=total_assets_side,
        imbalance=imbalance,
        is_balanced=is_balanced,
        warning=warning,
    )
