"""
The menu catalog: one row per dish, loaded once and read-only afterwards.
"""
import logging

import pandas as pd

from menu_analysis.errors import LoadError, EmptyDatasetError
from menu_analysis.schemas import MenuItem, cents_to_decimal
from menu_analysis.ingestion.loader import (
    read_source,
    standardize_columns,
    require_columns,
    coerce_identifier,
    coerce_text,
    parse_price_cents,
    identifier_key,
)
from menu_analysis.transformation.calculations import calculate_menu_category_metrics
from menu_analysis.transformation.ranking import dense_rank

logger = logging.getLogger(__name__)

TABLE_NAME = 'menu_items'
REQUIRED_COLUMNS = ['item_id', 'item_name', 'category', 'price']


class MenuCatalog:
    """Read-only collection of menu items, kept in load order."""

    def __init__(self, frame):
        self._frame = frame[['item_id', 'item_name', 'category', 'price_cents']].reset_index(drop=True)
        self._items = tuple(
            MenuItem(
                item_id=row.item_id,
                item_name=row.item_name,
                category=row.category,
                price=cents_to_decimal(row.price_cents),
            )
            for row in self._frame.itertuples(index=False)
        )
        self._index = {item.item_id: item for item in self._items}
        self._by_key = {identifier_key(item.item_id): item for item in self._items}

    @classmethod
    def load(cls, source, engine=None, table_name=TABLE_NAME):
        """
        Load and validate the menu table.

        Args:
            source: CSV path, DataFrame, or table name when `engine` is given
            engine: optional SQLAlchemy engine to read from

        Raises:
            LoadError: on missing columns or fields, bad prices, or duplicate ids
        """
        logger.info(f"Loading menu catalog from {source if not isinstance(source, pd.DataFrame) else 'DataFrame'}")
        raw = read_source(source, table_name, engine=engine)
        df = standardize_columns(raw, table_name)
        require_columns(df, REQUIRED_COLUMNS, table_name)

        frame = pd.DataFrame({
            'item_id': coerce_identifier(df['item_id'], 'item_id', table_name),
            'item_name': coerce_text(df['item_name'], 'item_name', table_name),
            'category': coerce_text(df['category'], 'category', table_name),
            'price_cents': parse_price_cents(df['price'], table_name),
        })

        duplicates = frame[frame.duplicated(subset=['item_id'], keep=False)]
        if not duplicates.empty:
            duplicate_ids = sorted(set(duplicates['item_id']), key=str)
            logger.error(f"Found {len(duplicates)} rows with duplicate item_id values: {duplicate_ids[:10]}")
            raise LoadError(f"Table '{table_name}' has duplicate item_id values: {duplicate_ids[:10]}")

        catalog = cls(frame)
        logger.info(f"Loaded {len(catalog)} menu items in {len(catalog.categories())} categories")
        return catalog

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, item_id):
        return self.get(item_id) is not None

    def get(self, item_id):
        """
        Return the MenuItem with this id, or None.

        An id spelled as text matches an int id, and the other way round.
        """
        item = self._index.get(item_id)
        if item is None:
            item = self._by_key.get(identifier_key(item_id))
        return item

    def all(self):
        return self._items

    def categories(self):
        return sorted(self._frame['category'].unique())

    @property
    def frame(self):
        """Normalised table with prices in integer cents. Returns a copy."""
        return self._frame.copy()

    def to_frame(self):
        """
        Export the catalog with the source column names and decimal prices.
        """
        df = self._frame.rename(columns={'price_cents': 'price'})
        df['price'] = df['price'] / 100
        return df

    def price_extremes(self, category=None):
        """
        Items tied at the highest and lowest price.

        Every item sharing the top (or bottom) price is returned, not a
        single arbitrary winner.

        Args:
            category: restrict to one category

        Returns:
            dict: {'max': [MenuItem, ...], 'min': [MenuItem, ...]}
        """
        df = self._frame
        if category is not None:
            df = df[df['category'] == category]
        if df.empty:
            what = f"category '{category}'" if category is not None else 'the menu'
            raise EmptyDatasetError(f"No menu items in {what} to compute price extremes")

        top_rank = dense_rank(df['price_cents'], ascending=False)
        bottom_rank = dense_rank(df['price_cents'], ascending=True)
        return {
            'max': [self._index[i] for i in df.loc[top_rank == 1, 'item_id']],
            'min': [self._index[i] for i in df.loc[bottom_rank == 1, 'item_id']],
        }

    def by_category(self):
        """
        Item count and average price per category.

        Returns:
            dict: {category: {'count': int, 'avg_price': Decimal}}, ordered by category
        """
        metrics = calculate_menu_category_metrics(self._frame)
        return {
            row.category: {'count': int(row.item_count), 'avg_price': row.avg_price}
            for row in metrics.itertuples(index=False)
        }
