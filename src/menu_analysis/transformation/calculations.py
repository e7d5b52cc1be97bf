"""
Business metrics calculations for the menu analysis pipeline.

All monetary columns are integer cents; conversion to Decimal happens at the
edges.
"""
import logging
import traceback
from decimal import Decimal, ROUND_HALF_UP

import pandas as pd

from menu_analysis.schemas import CENT

logger = logging.getLogger(__name__)


def _average_price(total_cents, count):
    if count == 0:
        return Decimal('0.00')
    return (Decimal(int(total_cents)) / Decimal(int(count)) / 100).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_menu_category_metrics(menu_df):
    """
    Calculate item count and average price by category.
    """
    try:
        logger.debug("Calculating menu category metrics")

        metrics = menu_df.groupby('category', sort=True).agg(
            item_count=('item_id', 'count'),
            total_cents=('price_cents', 'sum'),
        ).reset_index()

        metrics['avg_price'] = [
            _average_price(total, count)
            for total, count in zip(metrics['total_cents'], metrics['item_count'])
        ]

        return metrics[['category', 'item_count', 'avg_price']].copy()
    except Exception as e:
        logger.error(f"Error calculating menu category metrics: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_order_sizes(orders_df):
    """
    Count lines per order, ordered by order_id.
    """
    sizes = orders_df.groupby('order_id', sort=True).size().reset_index(name='line_count')
    return sizes


def calculate_item_stats(joined_df):
    """
    Count orders and revenue per menu item, most ordered first.
    """
    try:
        logger.info("Calculating item statistics")

        item_stats = joined_df.groupby(
            ['item_id', 'item_name', 'category', 'price_cents'], sort=False
        ).agg(
            times_ordered=('order_id', 'size'),
        ).reset_index()
        item_stats['revenue_cents'] = item_stats['times_ordered'] * item_stats['price_cents']

        # Most ordered first; ties by item id for a stable order
        item_stats = item_stats.sort_values(
            ['times_ordered', 'item_id'], ascending=[False, True], kind='mergesort'
        ).reset_index(drop=True)

        logger.info(f"Calculated statistics for {len(item_stats)} ordered items")
        return item_stats
    except Exception as e:
        logger.error(f"Error calculating item statistics: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_order_totals(joined_df, order_ids=None):
    """
    Sum item prices per order.

    Args:
        joined_df: priced order lines
        order_ids: every order to report; orders with no priced lines get 0

    Returns:
        pd.DataFrame: order_id, total_cents ordered by order_id
    """
    try:
        totals = joined_df.groupby('order_id')['price_cents'].sum()
        if order_ids is not None:
            totals = totals.reindex(pd.Index(list(order_ids), dtype=object), fill_value=0)
        totals = totals.sort_index()
        totals.index.name = 'order_id'

        return totals.astype('int64').reset_index(name='total_cents')
    except Exception as e:
        logger.error(f"Error calculating order totals: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def identify_top_spending_orders(order_totals_df, top_n=None):
    """
    Rank orders by total spend, highest first, ties broken by lowest order_id.
    """
    ranked = order_totals_df.sort_values(
        ['total_cents', 'order_id'], ascending=[False, True], kind='mergesort'
    ).reset_index(drop=True)

    if top_n is not None:
        ranked = ranked.head(top_n).copy()

    return ranked


def calculate_category_breakdown(joined_df, order_ids):
    """
    Number of lines and spend per category for the given orders.
    """
    try:
        wanted = list(order_ids)
        subset = joined_df[joined_df['order_id'].isin(wanted)]

        breakdown = subset.groupby(['order_id', 'category'], sort=False).agg(
            item_count=('item_id', 'size'),
            spend_cents=('price_cents', 'sum'),
        ).reset_index()

        # Keep the caller's order sequence, then biggest categories first
        position = {order_id: i for i, order_id in enumerate(wanted)}
        breakdown['_position'] = breakdown['order_id'].map(position)
        breakdown = breakdown.sort_values(
            ['_position', 'item_count', 'category'], ascending=[True, False, True], kind='mergesort'
        ).drop(columns=['_position']).reset_index(drop=True)

        logger.info(f"Calculated category breakdown for {len(wanted)} orders")
        return breakdown
    except Exception as e:
        logger.error(f"Error calculating category breakdown: {str(e)}")
        logger.error(traceback.format_exc())
        raise
