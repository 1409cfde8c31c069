"""
Tests for dashboard aggregation
"""

import pytest
from datetime import date, timedelta

from app.core.analytics import (
    UNSPECIFIED,
    aggregate,
    daily_series,
    range_cutoff,
    rank,
    summary_from_daily,
    top_entry,
)
from app.core.schemas import DailyPoint, RangeOption, RankedRow, SaleRecord


def sale(day, amount, product=None, category=None):
    return SaleRecord(dataset_id="ds", date=day, amount=amount, product=product, category=category)


@pytest.fixture
def sample_sales():
    return [
        sale(date(2024, 1, 1), 100.0, "Widget", "Tools"),
        sale(date(2024, 1, 1), 50.0, "Gadget", "Toys"),
        sale(date(2024, 1, 2), 200.0, "Widget", "Tools"),
        sale(date(2024, 1, 3), 30.0, None, "  "),
    ]


def test_aggregate_kpis(sample_sales):
    summary = aggregate(sample_sales)

    assert summary.kpis.total_revenue == 380.0
    assert summary.kpis.order_count == 4
    assert summary.kpis.avg_ticket == 95.0
    assert summary.kpis.top_product == "Widget"
    assert summary.kpis.top_product_share == pytest.approx(300.0 / 380.0)


def test_aggregate_chart_data_ascending(sample_sales):
    summary = aggregate(list(reversed(sample_sales)))

    assert [p.date for p in summary.chart_data] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    assert [p.revenue for p in summary.chart_data] == [150.0, 200.0, 30.0]


def test_aggregate_breakdowns(sample_sales):
    summary = aggregate(sample_sales)

    assert [(r.name, r.revenue) for r in summary.top_products] == [
        ("Widget", 300.0), ("Gadget", 50.0), (UNSPECIFIED, 30.0),
    ]
    assert [(r.name, r.revenue) for r in summary.categories] == [
        ("Tools", 300.0), ("Toys", 50.0), (UNSPECIFIED, 30.0),
    ]
    assert sum(r.revenue for r in summary.top_products) <= summary.kpis.total_revenue


def test_aggregate_empty_returns_none():
    assert aggregate([]) is None


def test_aggregate_top_n_limit():
    sales = [sale(date(2024, 1, 1), float(i + 1), f"P{i}") for i in range(8)]
    summary = aggregate(sales, top_n=3)

    assert [r.name for r in summary.top_products] == ["P7", "P6", "P5"]


def test_aggregate_tie_goes_to_first_seen():
    sales = [
        sale(date(2024, 1, 1), 40.0, "Second"),
        sale(date(2024, 1, 1), 40.0, "First"),
    ]
    summary = aggregate(sales)

    assert summary.kpis.top_product == "Second"
    assert [r.name for r in summary.top_products] == ["Second", "First"]


def test_aggregate_all_zero_amounts():
    summary = aggregate([sale(date(2024, 1, 1), 0.0, "A")])

    assert summary.kpis.total_revenue == 0.0
    assert summary.kpis.top_product is None
    assert summary.kpis.top_product_share == 0.0


def test_range_anchored_on_latest_sale():
    latest = date(2024, 6, 30)
    sales = [
        sale(latest, 10.0),
        sale(latest - timedelta(days=29), 20.0),
        sale(latest - timedelta(days=30), 40.0),
        sale(latest - timedelta(days=89), 80.0),
        sale(latest - timedelta(days=90), 160.0),
    ]

    assert aggregate(sales, RangeOption.LAST_30).kpis.total_revenue == 30.0
    assert aggregate(sales, "90").kpis.total_revenue == 150.0
    assert aggregate(sales, RangeOption.ALL).kpis.total_revenue == 310.0


def test_range_cutoff():
    latest = date(2024, 3, 31)
    assert range_cutoff(latest, RangeOption.LAST_30) == date(2024, 3, 2)
    assert range_cutoff(latest, "90") == date(2024, 1, 2)
    assert range_cutoff(latest, "all") is None

    with pytest.raises(ValueError):
        range_cutoff(latest, "7")


def test_rank_and_top_entry():
    sums = {"a": 5.0, "b": 9.0, "c": 5.0}

    assert [r.name for r in rank(sums, 10)] == ["b", "a", "c"]
    assert top_entry(sums) == ("b", 9.0)
    assert top_entry({}) == (None, 0.0)


def test_daily_series():
    points = daily_series([
        sale(date(2024, 1, 2), 5.0),
        sale(date(2024, 1, 1), 1.0),
        sale(date(2024, 1, 2), 2.5),
    ])

    assert [(p.date, p.revenue) for p in points] == [(date(2024, 1, 1), 1.0), (date(2024, 1, 2), 7.5)]


def test_summary_from_daily():
    daily = [
        DailyPoint(date=date(2024, 1, 2), revenue=60.0),
        DailyPoint(date=date(2024, 1, 1), revenue=40.0),
    ]
    top = [RankedRow(name="A", revenue=75.0), RankedRow(name="B", revenue=25.0)]

    summary = summary_from_daily(daily, top, order_count=4)

    assert summary.kpis.total_revenue == 100.0
    assert summary.kpis.avg_ticket == 25.0
    assert summary.kpis.top_product == "A"
    assert summary.kpis.top_product_share == 0.75
    assert [p.date for p in summary.chart_data] == [date(2024, 1, 1), date(2024, 1, 2)]
    assert summary.categories == []


def test_summary_from_daily_empty():
    assert summary_from_daily([], [], order_count=0) is None


def test_summary_from_daily_zero_revenue_has_no_top_product():
    daily = [DailyPoint(date=date(2024, 1, 1), revenue=0.0)]
    summary = summary_from_daily(daily, [RankedRow(name="A", revenue=0.0)], order_count=1)

    assert summary.kpis.top_product is None
    assert summary.kpis.top_product_share == 0.0


def test_zero_revenue_paths_agree():
    records = aggregate([sale(date(2024, 1, 1), 0.0, "A")])
    store = summary_from_daily(
        daily_series([sale(date(2024, 1, 1), 0.0, "A")]),
        [RankedRow(name="A", revenue=0.0)],
        order_count=1,
    )

    assert store.kpis == records.kpis
