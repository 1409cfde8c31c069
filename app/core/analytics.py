"""
Dashboard aggregation over sale records.

Everything here is a pure function of its inputs: no database access and
no clock. Empty input yields None so callers can tell "no data" apart
from a summary whose figures happen to be zero.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from app.config.settings import settings
from app.core.schemas import (
    DailyPoint,
    DashboardSummary,
    Kpis,
    RangeOption,
    RankedRow,
    SaleRecord,
)

# Set up logging
logger = logging.getLogger(__name__)

UNSPECIFIED = "Unspecified"

# Days subtracted from the latest sale date; the window includes both ends
RANGE_OFFSETS = {
    RangeOption.LAST_30: 29,
    RangeOption.LAST_90: 89,
}


def label_key(value: Optional[str]) -> str:
    """Grouping key for an optional product or category label."""
    if value is None:
        return UNSPECIFIED
    value = value.strip()
    return value or UNSPECIFIED


def range_cutoff(latest: date, range_option: Union[RangeOption, str]) -> Optional[date]:
    """
    First date included by a trailing window ending on ``latest``.

    Returns None for the "all" option.
    """
    offset = RANGE_OFFSETS.get(RangeOption(range_option))
    if offset is None:
        return None
    return latest - timedelta(days=offset)


def filter_by_range(sales: Sequence[SaleRecord], range_option: Union[RangeOption, str]) -> List[SaleRecord]:
    """Keep the sales inside the window anchored on the latest sale date."""
    if not sales:
        return []

    cutoff = range_cutoff(max(s.date for s in sales), range_option)
    if cutoff is None:
        return list(sales)
    return [s for s in sales if s.date >= cutoff]


def rank(sums: Dict[str, float], limit: int) -> List[RankedRow]:
    """Sort running sums by revenue, descending; equal sums keep first-seen order."""
    ordered = sorted(sums.items(), key=lambda item: item[1], reverse=True)
    return [RankedRow(name=name, revenue=revenue) for name, revenue in ordered[:limit]]


def top_entry(sums: Dict[str, float]):
    """
    Key with the strictly greatest sum.

    Ties go to the key seen first. Returns (None, 0.0) when no sum is positive.
    """
    top_name = None
    top_revenue = 0.0
    for name, revenue in sums.items():
        if revenue > top_revenue:
            top_name = name
            top_revenue = revenue
    return top_name, top_revenue


def daily_series(sales: Iterable[SaleRecord]) -> List[DailyPoint]:
    """Sum sale amounts per calendar date, ascending by date."""
    by_date: Dict[date, float] = {}
    for sale in sales:
        by_date[sale.date] = by_date.get(sale.date, 0.0) + sale.amount
    return [DailyPoint(date=d, revenue=revenue) for d, revenue in sorted(by_date.items())]


def aggregate(
    sales: Iterable[SaleRecord],
    range_option: Union[RangeOption, str] = RangeOption.ALL,
    top_n: Optional[int] = None,
) -> Optional[DashboardSummary]:
    """
    Compute the dashboard summary for a set of sales.

    Args:
        sales: Sale records of one dataset, in storage order
        range_option: "30", "90" or "all"
        top_n: Length of the product and category breakdowns

    Returns:
        Optional[DashboardSummary]: None when no sale falls inside the range
    """
    limit = top_n if top_n is not None else settings.TOP_N
    filtered = filter_by_range(list(sales), range_option)
    if not filtered:
        return None

    total_revenue = 0.0
    order_count = 0
    by_product: Dict[str, float] = {}
    by_category: Dict[str, float] = {}
    by_date: Dict[date, float] = {}

    for sale in filtered:
        amount = sale.amount
        product = label_key(sale.product)
        category = label_key(sale.category)

        total_revenue += amount
        order_count += 1
        by_product[product] = by_product.get(product, 0.0) + amount
        by_category[category] = by_category.get(category, 0.0) + amount
        by_date[sale.date] = by_date.get(sale.date, 0.0) + amount

    avg_ticket = total_revenue / order_count if order_count > 0 else 0.0
    top_product, top_revenue = top_entry(by_product)
    top_share = top_revenue / total_revenue if total_revenue > 0 else 0.0

    logger.debug(
        f"Aggregated {order_count} sales into {len(by_date)} days, "
        f"{len(by_product)} products, {len(by_category)} categories"
    )

    return DashboardSummary(
        kpis=Kpis(
            total_revenue=total_revenue,
            order_count=order_count,
            avg_ticket=avg_ticket,
            top_product=top_product,
            top_product_share=top_share,
        ),
        chart_data=[DailyPoint(date=d, revenue=revenue) for d, revenue in sorted(by_date.items())],
        top_products=rank(by_product, limit),
        categories=rank(by_category, limit),
    )


def summary_from_daily(
    daily: Sequence[DailyPoint],
    top_products: Sequence[RankedRow],
    order_count: int,
    categories: Sequence[RankedRow] = (),
) -> Optional[DashboardSummary]:
    """
    Build a summary from figures the store already aggregated.

    Total revenue is the sum of the daily series; the top product and its
    share come from the first entry of ``top_products`` when its revenue is
    positive.
    """
    if not daily:
        return None

    chart_data = sorted(daily, key=lambda p: p.date)
    total_revenue = sum(p.revenue for p in chart_data)
    avg_ticket = total_revenue / order_count if order_count > 0 else 0.0

    # Same rule as top_entry: no top product unless its revenue is positive
    leader = top_products[0] if top_products and top_products[0].revenue > 0 else None
    top_product = leader.name if leader else None
    top_share = leader.revenue / total_revenue if leader and total_revenue > 0 else 0.0

    return DashboardSummary(
        kpis=Kpis(
            total_revenue=total_revenue,
            order_count=order_count,
            avg_ticket=avg_ticket,
            top_product=top_product,
            top_product_share=top_share,
        ),
        chart_data=list(chart_data),
        top_products=list(top_products),
        categories=list(categories),
    )
