from datetime import date, time

import pandas as pd
import pytest

from menu_analysis.errors import LoadError, EmptyDatasetError
from menu_analysis.ingestion.order_log import OrderLog


def _order_lines(order_id, count, start=1):
    return [
        (str(start + i), str(order_id), '2023-01-05', '13:00:00', '101')
        for i in range(count)
    ]


def _frame(rows):
    return pd.DataFrame(rows, columns=['order_details_id', 'order_id', 'order_date', 'order_time', 'item_id'])


def test_load_from_csv(input_dir):
    order_log = OrderLog.load(input_dir / 'order_details.csv')

    assert len(order_log) == 11
    assert order_log.order_count() == 5


def test_dates_and_times_are_parsed(order_log):
    first = order_log.all()[0]

    assert first.order_date == date(2023, 1, 1)
    assert first.order_time == time(11, 38, 36)
    assert order_log.all()[-1].order_time == time(22, 50, 1)


def test_blank_item_id_is_kept(order_log):
    lines = order_log.lines_for(4)

    assert len(lines) == 2
    assert lines[1].item_id is None


def test_date_range(order_log):
    assert order_log.date_range() == (date(2023, 1, 1), date(2023, 3, 31))


def test_date_range_empty_raises():
    empty = OrderLog.load(_frame([]))

    with pytest.raises(EmptyDatasetError):
        empty.date_range()


def test_line_count_per_order(order_log):
    counts = order_log.line_count_per_order()

    assert counts == {1: 2, 2: 3, 3: 2, 4: 2, 5: 2}
    assert sum(counts.values()) == len(order_log)


def test_orders_above_is_strict():
    rows = _order_lines(1, 13) + _order_lines(2, 12, start=100)
    order_log = OrderLog.load(_frame(rows))

    assert order_log.orders_above(12) == 1
    assert order_log.orders_above(11) == 2
    assert order_log.orders_above(13) == 0


def test_order_details_id_is_optional(orders_df):
    order_log = OrderLog.load(orders_df.drop(columns=['order_details_id']))

    assert len(order_log) == 11
    assert order_log.all()[0].order_details_id is None


def test_column_aliases(orders_df):
    renamed = orders_df.rename(columns={'order_date': 'Order Date', 'item_id': 'menu_item_id'})

    assert len(OrderLog.load(renamed)) == 11


def test_bad_date_raises(orders_df):
    orders_df.loc[3, 'order_date'] = 'yesterday'

    with pytest.raises(LoadError, match='order_date'):
        OrderLog.load(orders_df)


def test_bad_time_raises(orders_df):
    orders_df.loc[0, 'order_time'] = '25 o\'clock'

    with pytest.raises(LoadError, match='order_time'):
        OrderLog.load(orders_df)


def test_missing_order_id_raises(orders_df):
    orders_df.loc[5, 'order_id'] = ''

    with pytest.raises(LoadError, match='order_id'):
        OrderLog.load(orders_df)


def test_missing_column_raises(orders_df):
    with pytest.raises(LoadError, match='missing required columns'):
        OrderLog.load(orders_df.drop(columns=['order_time']))


def test_leading_zero_order_ids_stay_distinct():
    rows = [
        ('1', '007', '2023-01-05', '13:00:00', '101'),
        ('2', '7', '2023-01-05', '13:05:00', '101'),
    ]
    order_log = OrderLog.load(_frame(rows))

    assert order_log.order_count() == 2
    assert order_log.order_ids() == ['007', '7']
