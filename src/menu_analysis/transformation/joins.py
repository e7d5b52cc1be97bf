"""
Data joining operations for the menu analysis pipeline.
"""
import logging

import pandas as pd

from menu_analysis.errors import ReferentialIntegrityError
from menu_analysis.ingestion.loader import identifier_key

logger = logging.getLogger(__name__)

JOINED_COLUMNS = [
    'order_details_id', 'order_id', 'order_date', 'order_time',
    'item_id', 'item_name', 'category', 'price_cents',
]


def align_item_ids(orders_df, menu_df):
    """
    Return a copy of the order lines whose item_id values use the menu's ids.

    Each table picks int or text ids on its own, so '101' on an order line
    and 101 on the menu are matched through their text form.
    """
    menu_ids = {identifier_key(v): v for v in menu_df['item_id']}
    aligned = orders_df.copy()
    aligned['item_id'] = pd.Series(
        [None if identifier_key(v) is None else menu_ids.get(identifier_key(v), v)
         for v in orders_df['item_id']],
        index=orders_df.index,
        dtype=object,
    )
    return aligned


def find_unknown_item_ids(orders_df, menu_df):
    """
    Item ids referenced by order lines that are not on the menu.
    Lines without an item_id are not references and are ignored.
    """
    referenced = set(align_item_ids(orders_df, menu_df)['item_id'].dropna())
    return referenced - set(menu_df['item_id'])


def join_order_data(orders_df, menu_df):
    """
    Join order lines with menu items into one priced DataFrame.

    Only lines that reference an item are returned, in load order.

    Raises:
        ReferentialIntegrityError: if any line references an unknown item
    """
    logger.info("Joining order_details with menu_items")

    orders_df = align_item_ids(orders_df, menu_df)
    unknown_items = find_unknown_item_ids(orders_df, menu_df)
    if unknown_items:
        logger.error(f"Found {len(unknown_items)} order line item ids with no matching menu item")
        raise ReferentialIntegrityError(unknown_items)

    priced_lines = orders_df[orders_df['item_id'].notna()]
    joined = pd.merge(
        priced_lines,
        menu_df,
        on='item_id',
        how='inner',
        sort=False,
        validate='many_to_one',
    )

    # Every priced line must survive the join
    if len(joined) != len(priced_lines):
        raise ReferentialIntegrityError(find_unknown_item_ids(orders_df, menu_df))

    logger.info(f"Joined data has {len(joined)} rows")
    return joined[JOINED_COLUMNS]


def check_for_missing_relationships(orders_df, menu_df):
    """
    Summarise the relationships between the two tables without raising.
    """
    orders_df = align_item_ids(orders_df, menu_df)
    item_ids_in_menu = set(menu_df['item_id'])
    item_ids_in_orders = set(orders_df['item_id'].dropna())

    unknown_items = item_ids_in_orders - item_ids_in_menu
    unused_menu_items = item_ids_in_menu - item_ids_in_orders
    unassigned_lines = int(orders_df['item_id'].isna().sum())

    results = {
        'unknown_items_count': len(unknown_items),
        'unknown_items': sorted(unknown_items, key=str)[:10],
        'unused_menu_items_count': len(unused_menu_items),
        'unused_menu_items': sorted(unused_menu_items, key=str)[:10],
        'unassigned_lines_count': unassigned_lines,
    }

    if results['unknown_items_count'] > 0:
        logger.warning(f"Found {results['unknown_items_count']} order item ids with unknown menu items")

    if results['unused_menu_items_count'] > 0:
        logger.info(f"Found {results['unused_menu_items_count']} menu items that have never been ordered")

    if unassigned_lines > 0:
        logger.info(f"Found {unassigned_lines} order lines with no item")

    return results
