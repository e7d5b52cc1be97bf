"""
Data ingestion components for the menu analysis pipeline.

Source tables can be CSV files, in-memory DataFrames, or tables read through
a SQLAlchemy engine. Everything here normalises raw columns into the shapes
MenuCatalog and OrderLog expect, and raises LoadError on anything malformed.
"""
import logging
import traceback
from decimal import Decimal, InvalidOperation
from pathlib import Path

import numpy as np
import pandas as pd
from sqlalchemy.exc import SQLAlchemyError

from menu_analysis.errors import LoadError
from menu_analysis.schemas import CENT

logger = logging.getLogger(__name__)

DATE_FORMATS = ['%Y-%m-%d', '%m/%d/%y', '%m/%d/%Y', '%Y-%m-%d %H:%M:%S', '%d-%m-%Y']
TIME_FORMATS = ['%H:%M:%S', '%I:%M:%S %p', '%H:%M', '%I:%M %p', '%H:%M:%S.%f']

# Source column spellings mapped onto the names used internally
COLUMN_MAPPING = {
    'menu_items': {
        'menu_item_id': 'item_id',
        'itemid': 'item_id',
        'item id': 'item_id',
        'name': 'item_name',
        'itemname': 'item_name',
        'item name': 'item_name',
        'cuisine': 'category',
        'unit_price': 'price',
        'unit price': 'price',
    },
    'order_details': {
        'orderid': 'order_id',
        'order id': 'order_id',
        'orderdate': 'order_date',
        'order date': 'order_date',
        'date': 'order_date',
        'ordertime': 'order_time',
        'order time': 'order_time',
        'time': 'order_time',
        'menu_item_id': 'item_id',
        'itemid': 'item_id',
        'item id': 'item_id',
        'order_detail_id': 'order_details_id',
        'order details id': 'order_details_id',
    },
}


def read_source(source, table_name, engine=None):
    """
    Read a raw table from a CSV path, a DataFrame, or a database table.

    When `engine` is given, `source` is the table name to read.
    """
    if isinstance(source, pd.DataFrame):
        logger.info(f"Using in-memory frame with {len(source)} rows for {table_name}")
        return source.copy()

    if engine is not None:
        try:
            df = pd.read_sql_table(str(source), engine)
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Failed to read table {source}: {str(e)}")
            raise LoadError(f"Could not read table {source}: {str(e)}") from e
        logger.info(f"Loaded {len(df)} rows from table {source}")
        return df

    file_path = Path(source)
    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise LoadError(f"File not found: {file_path}")

    try:
        df = pd.read_csv(file_path, dtype=str, encoding='utf-8-sig', skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse {file_path}: {str(e)}")
        logger.error(traceback.format_exc())
        raise LoadError(f"Failed to parse {file_path}: {str(e)}") from e

    logger.info(f"Loaded {len(df)} rows from {file_path}")
    return df


def standardize_columns(df, table_name):
    """
    Strip and lower-case column names, then apply the known aliases.
    """
    df = df.rename(columns=lambda x: x.strip().lower() if isinstance(x, str) else x)

    df_mapping = {}
    for old_col, new_col in COLUMN_MAPPING.get(table_name, {}).items():
        # Only rename when the canonical name is not already present
        if old_col in df.columns and new_col not in df.columns:
            df_mapping[old_col] = new_col

    if df_mapping:
        logger.info(f"Standardizing column names in '{table_name}': {df_mapping}")
        df = df.rename(columns=df_mapping)
    return df


def require_columns(df, required, table_name):
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise LoadError(
            f"Table '{table_name}' is missing required columns: {missing}. "
            f"Available columns: {list(df.columns)}"
        )


def _bad_rows(mask):
    # 1-based data row positions
    return [int(i) + 1 for i in np.flatnonzero(mask.to_numpy())[:10]]


def _as_text(series):
    """Strip values and turn blanks into None."""
    def clean(value):
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        text = str(value).strip()
        return text or None
    # Built as an object Series so blanks stay None rather than NaN
    return pd.Series([clean(v) for v in series], index=series.index, dtype=object)


def _exact_int(text):
    """
    The int spelled by `text`, or None when converting would change the id.

    '101' and '101.0' are 101; '007', '-0' and '1e2' are not ints.
    """
    whole, _, fraction = text.partition('.')
    if fraction.strip('0') or not whole.lstrip('-').isdigit():
        return None
    number = int(whole)
    return number if str(number) == whole else None


def coerce_identifier(series, column, table_name, required=True):
    """
    Normalise an identifier column.

    Values become ints when every present value spells an int exactly,
    strings otherwise, so distinct source ids never merge. Blank values
    become None, or raise LoadError when `required`.
    """
    text = _as_text(series)
    missing = text.isna()
    if required and missing.any():
        raise LoadError(
            f"Table '{table_name}' has {int(missing.sum())} rows with a missing {column} "
            f"(rows {_bad_rows(missing)})"
        )

    present = [v for v in text if v is not None]
    numbers = [_exact_int(v) for v in present]
    use_ints = bool(present) and all(n is not None for n in numbers)
    return pd.Series(
        [None if v is None else (_exact_int(v) if use_ints else v) for v in text],
        index=text.index,
        dtype=object,
    )


def identifier_key(value):
    """
    Text form of a coerced identifier, used to match ids across tables
    whose columns were coerced to different types.
    """
    return None if value is None or pd.isna(value) else str(value)


def coerce_text(series, column, table_name):
    text = _as_text(series)
    missing = text.isna()
    if missing.any():
        raise LoadError(
            f"Table '{table_name}' has {int(missing.sum())} rows with a missing {column} "
            f"(rows {_bad_rows(missing)})"
        )
    return text


def parse_price_cents(series, table_name, column='price'):
    """
    Parse prices into integer cents. Currency symbols and thousands
    separators are stripped; missing, unparseable, negative or sub-cent
    prices raise.
    """
    text = pd.Series(
        [None if pd.isna(v) else v.replace('$', '').replace(',', '').strip() for v in _as_text(series)],
        index=series.index,
        dtype=object,
    )

    def to_cents(value):
        if value is None or pd.isna(value):
            return None
        try:
            amount = Decimal(value)
            if not amount.is_finite() or amount < 0 or amount != amount.quantize(CENT):
                return None
        except InvalidOperation:
            return None
        return int(amount * 100)

    cents = pd.Series([to_cents(v) for v in text], index=text.index, dtype=object)
    invalid = cents.isna()
    if invalid.any():
        examples = text[invalid].head(5).tolist()
        raise LoadError(
            f"Table '{table_name}' has {int(invalid.sum())} invalid {column} values "
            f"(rows {_bad_rows(invalid)}, e.g. {examples})"
        )
    return cents.astype('int64')


def _parse_with_formats(series, formats):
    if pd.api.types.is_datetime64_any_dtype(series):
        return series

    text = _as_text(series)
    parsed = pd.Series(pd.NaT, index=text.index, dtype='datetime64[ns]')
    # Try each format in turn on the rows still unparsed
    for fmt in formats:
        remaining = parsed.isna() & text.notna()
        if not remaining.any():
            break
        attempt = pd.to_datetime(text[remaining], format=fmt, errors='coerce')
        parsed.loc[remaining] = attempt
    return parsed


def parse_dates(series, table_name, column='order_date'):
    parsed = _parse_with_formats(series, DATE_FORMATS)
    invalid = parsed.isna()
    if invalid.any():
        examples = series[invalid].head(5).tolist()
        raise LoadError(
            f"Table '{table_name}' has {int(invalid.sum())} invalid {column} values "
            f"(rows {_bad_rows(invalid)}, e.g. {examples})"
        )
    return parsed.dt.date.astype(object)


def parse_times(series, table_name, column='order_time'):
    parsed = _parse_with_formats(series, TIME_FORMATS)
    invalid = parsed.isna()
    if invalid.any():
        examples = series[invalid].head(5).tolist()
        raise LoadError(
            f"Table '{table_name}' has {int(invalid.sum())} invalid {column} values "
            f"(rows {_bad_rows(invalid)}, e.g. {examples})"
        )
    return parsed.dt.time.astype(object)

