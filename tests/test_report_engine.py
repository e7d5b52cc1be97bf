from decimal import Decimal

import pandas as pd
import pytest

from menu_analysis.errors import ReferentialIntegrityError, EmptyDatasetError
from menu_analysis.ingestion.menu_catalog import MenuCatalog
from menu_analysis.ingestion.order_log import OrderLog
from menu_analysis.reporting.engine import ReportEngine


def _engine(menu_rows, order_rows):
    catalog = MenuCatalog.load(pd.DataFrame(menu_rows, columns=['item_id', 'item_name', 'category', 'price']))
    order_log = OrderLog.load(pd.DataFrame(order_rows, columns=['order_id', 'order_date', 'order_time', 'item_id']))
    return ReportEngine(catalog, order_log)


def test_item_stats_sorted_by_times_ordered(report_engine):
    stats = report_engine.item_stats()

    assert [s.item.item_id for s in stats] == [106, 101, 105, 102, 103, 107]
    assert [s.times_ordered for s in stats] == [3, 2, 2, 1, 1, 1]
    assert stats[0].total_revenue == Decimal('53.85')
    assert stats[1].total_revenue == Decimal('25.90')


def test_item_stats_unknown_item_raises(menu_df, orders_df):
    orders_df.loc[0, 'item_id'] = '999'
    engine = ReportEngine(MenuCatalog.load(menu_df), OrderLog.load(orders_df))

    with pytest.raises(ReferentialIntegrityError) as excinfo:
        engine.item_stats()

    assert excinfo.value.unknown_item_ids == [999]


def test_order_totals(report_engine):
    totals = report_engine.order_totals()

    assert totals == {
        1: Decimal('32.45'),
        2: Decimal('30.90'),
        3: Decimal('31.90'),
        4: Decimal('11.95'),
        5: Decimal('32.45'),
    }


def test_order_total_of_two_lines():
    engine = _engine(
        [(1, 'Soup', 'Starters', '4.50'), (2, 'Salad', 'Starters', '3.25')],
        [(10, '2023-01-01', '12:00:00', 1), (10, '2023-01-01', '12:00:00', 2)],
    )

    assert engine.order_totals() == {10: Decimal('7.75')}


def test_order_with_only_blank_items_totals_zero():
    engine = _engine(
        [(1, 'Soup', 'Starters', '4.50')],
        [(10, '2023-01-01', '12:00:00', 1), (11, '2023-01-01', '12:05:00', None)],
    )

    assert engine.order_totals() == {10: Decimal('4.50'), 11: Decimal('0.00')}


def test_top_spending_orders(report_engine):
    top = report_engine.top_spending_orders(5)

    assert top == [
        (1, Decimal('32.45')),
        (5, Decimal('32.45')),
        (3, Decimal('31.90')),
        (2, Decimal('30.90')),
        (4, Decimal('11.95')),
    ]
    totals = [total for _, total in top]
    assert totals == sorted(totals, reverse=True)


def test_top_spending_orders_limits(report_engine):
    assert len(report_engine.top_spending_orders(3)) == 3
    assert len(report_engine.top_spending_orders(50)) == 5
    assert report_engine.top_spending_orders(0) == []

    with pytest.raises(ValueError):
        report_engine.top_spending_orders(-1)


def test_highest_order_detail_breaks_ties_by_lowest_order_id(report_engine):
    detail = report_engine.highest_order_detail()

    assert report_engine.highest_order_id() == 1
    assert {d.order_id for d in detail} == {1}
    assert [d.item.item_name for d in detail] == ['Korean Beef Bowl', 'Spaghetti']
    assert sum(d.price for d in detail) == report_engine.max_order_value()


def test_max_order_value(report_engine):
    assert report_engine.max_order_value() == Decimal('32.45')
    assert report_engine.max_order_value() == max(report_engine.order_totals().values())


def test_empty_orders_raise():
    engine = _engine([(1, 'Soup', 'Starters', '4.50')], [])

    with pytest.raises(EmptyDatasetError):
        engine.max_order_value()
    with pytest.raises(EmptyDatasetError):
        engine.highest_order_detail()
    with pytest.raises(EmptyDatasetError):
        engine.largest_orders()


def test_largest_orders(report_engine):
    assert report_engine.largest_orders() == {'line_count': 3, 'order_ids': [2]}


def test_least_and_most_ordered_share_ranks(report_engine):
    extremes = report_engine.least_and_most_ordered()

    assert [s.item.item_name for s in extremes['most']] == ['Korean Beef Bowl']
    assert [s.item.item_name for s in extremes['least']] == ['Cheeseburger', 'Chicken Tacos', 'Edamame']


def test_ranked_item_stats_dense_rank(report_engine):
    ranked = report_engine.ranked_item_stats()

    assert ranked['rank'].tolist() == [1, 2, 2, 3, 3, 3]


def test_category_breakdown(report_engine):
    breakdown = report_engine.category_breakdown([1, 2])

    assert breakdown[['order_id', 'category', 'item_count']].values.tolist() == [
        [1, 'Asian', 1],
        [1, 'Italian', 1],
        [2, 'American', 2],
        [2, 'Asian', 1],
    ]
    assert breakdown['spend'].tolist() == [
        Decimal('17.95'), Decimal('14.50'), Decimal('25.90'), Decimal('5.00'),
    ]


def test_reports_do_not_modify_tables(report_engine, catalog, order_log):
    before_menu = catalog.frame
    before_orders = order_log.frame

    report_engine.report_tables(top_n=2)
    report_engine.item_stats()

    pd.testing.assert_frame_equal(catalog.frame, before_menu)
    pd.testing.assert_frame_equal(order_log.frame, before_orders)


def test_report_tables(report_engine):
    tables = report_engine.report_tables(top_n=2)

    assert set(tables) == {'item_stats', 'category_metrics', 'order_totals', 'top_orders', 'top_orders_by_category'}
    assert tables['top_orders']['order_id'].tolist() == [1, 5]
    assert tables['order_totals']['line_count'].tolist() == [2, 3, 2, 2, 2]
    assert tables['item_stats']['total_revenue'].iloc[0] == pytest.approx(53.85)


def test_text_and_int_item_ids_resolve_across_tables():
    catalog = MenuCatalog.load(pd.DataFrame(
        [('101', 'Soup', 'Starters', '4.50'), ('A2', 'Salad', 'Starters', '3.25')],
        columns=['item_id', 'item_name', 'category', 'price'],
    ))
    order_log = OrderLog.load(pd.DataFrame(
        [('1', '2023-01-01', '12:00:00', '101'), ('1', '2023-01-01', '12:00:00', '101')],
        columns=['order_id', 'order_date', 'order_time', 'item_id'],
    ))
    engine = ReportEngine(catalog, order_log)

    assert engine.order_totals() == {1: Decimal('9.00')}
    assert [s.item.item_id for s in engine.item_stats()] == ['101']
    assert [d.item.item_name for d in engine.highest_order_detail()] == ['Soup', 'Soup']


def test_no_priced_lines():
    engine = _engine(
        [(1, 'Soup', 'Starters', '4.50')],
        [(10, '2023-01-01', '12:00:00', None)],
    )

    assert engine.item_stats() == []
    assert engine.ranked_item_stats().empty
    assert engine.order_totals() == {10: Decimal('0.00')}
    assert engine.highest_order_detail() == []
    with pytest.raises(EmptyDatasetError):
        engine.least_and_most_ordered()
