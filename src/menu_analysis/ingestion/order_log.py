"""
The order log: one row per ordered line item.
"""
import logging

import pandas as pd

from menu_analysis.errors import EmptyDatasetError
from menu_analysis.schemas import OrderLine
from menu_analysis.ingestion.loader import (
    read_source,
    standardize_columns,
    require_columns,
    coerce_identifier,
    parse_dates,
    parse_times,
)
from menu_analysis.transformation.calculations import calculate_order_sizes

logger = logging.getLogger(__name__)

TABLE_NAME = 'order_details'
REQUIRED_COLUMNS = ['order_id', 'order_date', 'order_time', 'item_id']
COLUMNS = ['order_details_id', 'order_id', 'order_date', 'order_time', 'item_id']


class OrderLog:
    """Read-only collection of order lines, kept in load order."""

    def __init__(self, frame):
        self._frame = frame[COLUMNS].reset_index(drop=True)
        self._lines = tuple(
            OrderLine(
                order_id=row.order_id,
                order_date=row.order_date,
                order_time=row.order_time,
                item_id=row.item_id,
                order_details_id=row.order_details_id,
            )
            for row in self._frame.itertuples(index=False)
        )

    @classmethod
    def load(cls, source, engine=None, table_name=TABLE_NAME):
        """
        Load and validate the order details table.

        Lines with a blank item_id are kept; they count toward order sizes
        but carry no price.

        Raises:
            LoadError: on missing columns, blank order ids, or unparseable dates/times
        """
        logger.info(f"Loading order log from {source if not isinstance(source, pd.DataFrame) else 'DataFrame'}")
        raw = read_source(source, table_name, engine=engine)
        df = standardize_columns(raw, table_name)
        require_columns(df, REQUIRED_COLUMNS, table_name)

        if 'order_details_id' in df.columns:
            details_id = coerce_identifier(df['order_details_id'], 'order_details_id', table_name, required=False)
        else:
            details_id = pd.Series([None] * len(df), index=df.index, dtype=object)

        frame = pd.DataFrame({
            'order_details_id': details_id,
            'order_id': coerce_identifier(df['order_id'], 'order_id', table_name),
            'order_date': parse_dates(df['order_date'], table_name),
            'order_time': parse_times(df['order_time'], table_name),
            'item_id': coerce_identifier(df['item_id'], 'item_id', table_name, required=False),
        })

        unassigned = int(frame['item_id'].isna().sum())
        if unassigned > 0:
            logger.warning(f"Found {unassigned} order lines with no item_id")

        order_log = cls(frame)
        logger.info(f"Loaded {len(order_log)} order lines across {order_log.order_count()} orders")
        return order_log

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    def all(self):
        return self._lines

    @property
    def frame(self):
        """Normalised order lines. Returns a copy."""
        return self._frame.copy()

    def to_frame(self):
        return self.frame

    def order_ids(self):
        return sorted(self._frame['order_id'].unique())

    def order_count(self):
        return int(self._frame['order_id'].nunique())

    def lines_for(self, order_id):
        return tuple(line for line in self._lines if line.order_id == order_id)

    def date_range(self):
        """
        First and last order date.

        Raises:
            EmptyDatasetError: if there are no order lines
        """
        if self._frame.empty:
            raise EmptyDatasetError("No order lines to compute a date range")
        dates = self._frame['order_date']
        return dates.min(), dates.max()

    def line_count_per_order(self):
        """
        Number of lines in each order, keyed by order_id in ascending order.
        """
        sizes = calculate_order_sizes(self._frame)
        return dict(zip(sizes['order_id'], sizes['line_count'].astype(int).tolist()))

    def orders_above(self, threshold):
        """Count orders with strictly more than `threshold` lines."""
        return sum(1 for count in self.line_count_per_order().values() if count > threshold)
