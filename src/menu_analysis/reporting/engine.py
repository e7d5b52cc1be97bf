"""
Aggregate reports over a loaded menu catalog and order log.
"""
import logging

from menu_analysis.errors import EmptyDatasetError
from menu_analysis.schemas import ItemStat, OrderLineDetail, cents_to_decimal
from menu_analysis.transformation.joins import join_order_data
from menu_analysis.transformation.ranking import add_dense_rank
from menu_analysis.transformation.calculations import (
    calculate_item_stats,
    calculate_order_totals,
    calculate_order_sizes,
    calculate_category_breakdown,
    calculate_menu_category_metrics,
    identify_top_spending_orders,
)

logger = logging.getLogger(__name__)


class ReportEngine:
    """
    Computes reports from a MenuCatalog and an OrderLog.

    Every method derives its result from the two tables on each call and
    never modifies them.
    """

    def __init__(self, catalog, order_log):
        self.catalog = catalog
        self.order_log = order_log

    def _joined(self):
        return join_order_data(self.order_log.frame, self.catalog.frame)

    def _item_stats_frame(self):
        return calculate_item_stats(self._joined())

    def _order_totals_frame(self):
        return calculate_order_totals(self._joined(), self.order_log.order_ids())

    def _stat_from_row(self, row):
        return ItemStat(
            item=self.catalog.get(row.item_id),
            times_ordered=int(row.times_ordered),
            total_revenue=cents_to_decimal(row.revenue_cents),
        )

    def item_stats(self):
        """
        Times ordered and revenue per ordered menu item, most ordered first.

        Raises:
            ReferentialIntegrityError: if an order line references an unknown item
        """
        stats = self._item_stats_frame()
        return [self._stat_from_row(row) for row in stats.itertuples(index=False)]

    def ranked_item_stats(self):
        """Item statistics as a DataFrame with a dense rank on times_ordered."""
        return add_dense_rank(self._item_stats_frame(), 'times_ordered', ascending=False)

    def least_and_most_ordered(self):
        """
        Items tied for the most and the fewest orders.

        Returns:
            dict: {'most': [ItemStat, ...], 'least': [ItemStat, ...]}
        """
        stats = self._item_stats_frame()
        if stats.empty:
            raise EmptyDatasetError("No ordered items to rank")

        most = add_dense_rank(stats, 'times_ordered', ascending=False)
        least = add_dense_rank(stats, 'times_ordered', ascending=True)
        return {
            'most': [self._stat_from_row(row) for row in most[most['rank'] == 1].itertuples(index=False)],
            'least': [self._stat_from_row(row) for row in least[least['rank'] == 1].itertuples(index=False)],
        }

    def order_totals(self):
        """
        Total spend per order, keyed by order_id in ascending order.
        """
        totals = self._order_totals_frame()
        return {
            order_id: cents_to_decimal(total)
            for order_id, total in zip(totals['order_id'], totals['total_cents'])
        }

    def top_spending_orders(self, n):
        """
        The `n` orders with the highest spend, highest first.
        Ties are broken by the lowest order_id.

        Returns:
            list: (order_id, total) tuples
        """
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        ranked = identify_top_spending_orders(self._order_totals_frame(), top_n=n)
        return [
            (order_id, cents_to_decimal(total))
            for order_id, total in zip(ranked['order_id'], ranked['total_cents'])
        ]

    def highest_order_id(self):
        """
        The order with the highest spend; the lowest order_id wins a tie.
        """
        top = self.top_spending_orders(1)
        if not top:
            raise EmptyDatasetError("No orders to find the highest spend")
        return top[0][0]

    def highest_order_detail(self):
        """
        Priced lines of the highest-spend order, in load order.
        """
        order_id = self.highest_order_id()
        details = [
            OrderLineDetail(line=line, item=self.catalog.get(line.item_id))
            for line in self.order_log.lines_for(order_id)
            if line.item_id is not None
        ]
        logger.info(f"Highest spend order {order_id} has {len(details)} priced lines")
        return details

    def max_order_value(self):
        """
        The highest total spend of any order.
        """
        totals = self._order_totals_frame()
        if totals.empty:
            raise EmptyDatasetError("No orders to compute a maximum order value")
        return cents_to_decimal(totals['total_cents'].max())

    def largest_orders(self):
        """
        Orders tied for the most lines.

        Returns:
            dict: {'line_count': int, 'order_ids': [...]}
        """
        sizes = calculate_order_sizes(self.order_log.frame)
        if sizes.empty:
            raise EmptyDatasetError("No orders to rank by size")
        ranked = add_dense_rank(sizes, 'line_count', ascending=False)
        top = ranked[ranked['rank'] == 1]
        return {
            'line_count': int(top['line_count'].iloc[0]),
            'order_ids': top['order_id'].tolist(),
        }

    def category_breakdown(self, order_ids):
        """
        Lines and spend per category for each of `order_ids`.

        Returns:
            pd.DataFrame: order_id, category, item_count, spend
        """
        breakdown = calculate_category_breakdown(self._joined(), order_ids)
        breakdown['spend'] = breakdown['spend_cents'].map(cents_to_decimal)
        return breakdown.drop(columns=['spend_cents'])

    def report_tables(self, top_n=5):
        """
        The report tables as DataFrames, for export and staging.
        """
        item_stats = self.ranked_item_stats()
        item_stats['total_revenue'] = item_stats['revenue_cents'] / 100
        item_stats['price'] = item_stats['price_cents'] / 100

        category_metrics = calculate_menu_category_metrics(self.catalog.frame)
        category_metrics['avg_price'] = category_metrics['avg_price'].astype(float)

        totals = self._order_totals_frame()
        sizes = calculate_order_sizes(self.order_log.frame)
        order_totals = totals.merge(sizes, on='order_id', how='left')
        order_totals['total_spend'] = order_totals['total_cents'] / 100

        top_orders = identify_top_spending_orders(totals, top_n=top_n)
        top_orders['total_spend'] = top_orders['total_cents'] / 100

        breakdown = self.category_breakdown(top_orders['order_id'].tolist())
        breakdown['spend'] = breakdown['spend'].astype(float)

        return {
            'item_stats': item_stats[['rank', 'item_id', 'item_name', 'category', 'price',
                                      'times_ordered', 'total_revenue']],
            'category_metrics': category_metrics,
            'order_totals': order_totals[['order_id', 'line_count', 'total_spend']],
            'top_orders': top_orders[['order_id', 'total_spend']],
            'top_orders_by_category': breakdown,
        }
