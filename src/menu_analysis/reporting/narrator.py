"""
Plain-text report built from ReportEngine results.
"""
import logging
from datetime import datetime

import pandas as pd

logger = logging.getLogger(__name__)

RULE = "=" * 72

RECOMMENDATIONS = """\
1. Protect the high-value baskets. The biggest orders lean on the most
   expensive cuisines; keep those dishes consistently available and
   feature them on the menu front page.
2. Review the slowest movers. Dishes at the bottom of the order ranking
   are candidates for a recipe refresh, a price change, or removal.
3. Target large parties. Orders above the bulk threshold are a distinct
   segment; family or group bundles can grow them further.
4. Promote across categories. Pair best sellers from one cuisine with
   underperforming dishes from another in combo offers.
5. Keep ranking fair. Items with equal order counts share a rank, so menu
   decisions should treat tied dishes the same way.
"""


def _money(amount):
    return f"${amount:,.2f}"


def _names(items):
    return ", ".join(f"{item.item_name} ({_money(item.price)})" for item in items)


def _table(df):
    if df.empty:
        return "  (none)"
    return "\n".join("  " + line for line in df.to_string(index=False).splitlines())


class Narrator:
    """
    Formats a ReportEngine into a human-readable report.
    """

    def __init__(self, engine, top_n=5, bulk_threshold=12):
        self.engine = engine
        self.top_n = top_n
        self.bulk_threshold = bulk_threshold

    def menu_section(self):
        catalog = self.engine.catalog
        extremes = catalog.price_extremes()
        by_category = pd.DataFrame([
            {'category': category, 'items': stats['count'], 'avg_price': _money(stats['avg_price'])}
            for category, stats in catalog.by_category().items()
        ])

        lines = [
            "MENU OVERVIEW",
            f"  Items on the menu:     {len(catalog)}",
            f"  Categories:            {len(catalog.categories())}",
            f"  Most expensive:        {_names(extremes['max'])}",
            f"  Least expensive:       {_names(extremes['min'])}",
            "",
            "  Items and average price by category:",
            _table(by_category),
        ]
        return "\n".join(lines)

    def orders_section(self):
        order_log = self.engine.order_log
        first, last = order_log.date_range()
        largest = self.engine.largest_orders()

        lines = [
            "ORDER OVERVIEW",
            f"  Date range:            {first.isoformat()} to {last.isoformat()}",
            f"  Orders:                {order_log.order_count()}",
            f"  Items ordered:         {len(order_log)}",
            f"  Largest order size:    {largest['line_count']} items "
            f"(orders {', '.join(str(i) for i in largest['order_ids'])})",
            f"  Orders with more than {self.bulk_threshold} items: "
            f"{order_log.orders_above(self.bulk_threshold)}",
        ]
        return "\n".join(lines)

    def items_section(self):
        ranked = self.engine.ranked_item_stats()
        if ranked.empty:
            # Orders exist but none of their lines name a menu item
            return "\n".join([
                "ITEM PERFORMANCE",
                "  Most ordered:          (none)",
                "  Least ordered:         (none)",
            ])

        extremes = self.engine.least_and_most_ordered()
        ranked = ranked.assign(revenue=ranked['revenue_cents'].map(lambda c: _money(c / 100)))

        def describe(stats):
            return ", ".join(
                f"{s.item.item_name} [{s.item.category}] x{s.times_ordered}" for s in stats
            )

        lines = [
            "ITEM PERFORMANCE",
            f"  Most ordered:          {describe(extremes['most'])}",
            f"  Least ordered:         {describe(extremes['least'])}",
            "",
            "  Items by times ordered:",
            _table(ranked[['rank', 'item_name', 'category', 'times_ordered', 'revenue']]),
        ]
        return "\n".join(lines)

    def spending_section(self):
        top_orders = self.engine.top_spending_orders(self.top_n)
        highest_id = self.engine.highest_order_id()
        detail = self.engine.highest_order_detail()

        top_df = pd.DataFrame(
            [{'order_id': order_id, 'total_spend': _money(total)} for order_id, total in top_orders]
        )
        detail_df = pd.DataFrame([
            {'item_name': d.item.item_name, 'category': d.category, 'price': _money(d.price)}
            for d in detail
        ])
        breakdown = self.engine.category_breakdown([order_id for order_id, _ in top_orders])
        breakdown['spend'] = breakdown['spend'].map(_money)

        lines = [
            "TOP SPENDING ORDERS",
            f"  Highest order value:   {_money(self.engine.max_order_value())} (order {highest_id})",
            "",
            f"  Top {self.top_n} orders by spend:",
            _table(top_df),
            "",
            f"  Items in order {highest_id}:",
            _table(detail_df),
            "",
            f"  Categories in the top {self.top_n} orders:",
            _table(breakdown),
        ]
        return "\n".join(lines)

    def quality_section(self, quality_results):
        if quality_results is None:
            return "DATA QUALITY\n  Checks skipped."

        relationships = quality_results.get('referential_integrity', {})
        missing = quality_results.get('missing_values', {})
        lines = [
            "DATA QUALITY",
            f"  Issues found:          {quality_results.get('total_issues', 0)}",
            f"  Lines without an item: {relationships.get('unassigned_lines_count', 0)}",
            f"  Menu items never ordered: {relationships.get('unused_menu_items_count', 0)}",
        ]
        for table_name, result in missing.items():
            if result['total_missing'] > 0:
                lines.append(f"  Missing values in {table_name}: {result['missing_columns']}")
        return "\n".join(lines)

    def render(self, quality_results=None):
        """
        Build the full report text.
        """
        logger.info("Rendering report")
        sections = [
            RULE,
            "RESTAURANT MENU & ORDER ANALYSIS",
            f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            RULE,
            self.menu_section(),
            self.orders_section(),
            self.items_section(),
            self.spending_section(),
            self.quality_section(quality_results),
            "RECOMMENDATIONS\n" + RECOMMENDATIONS.rstrip(),
            RULE,
        ]
        return "\n\n".join(sections) + "\n"
