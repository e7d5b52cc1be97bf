"""
Output components for the menu analysis pipeline: the text report, CSV
exports, and staging tables in the configured database.
"""
import os
import logging
import traceback

import pandas as pd
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from menu_analysis.db.models import (
    MenuItemRecord,
    OrderDetailRecord,
    ItemStatRecord,
    OrderTotalRecord,
    CategoryMetricRecord,
)

logger = logging.getLogger(__name__)

# Report tables with a declared model; anything else is replaced wholesale
REPORT_MODELS = {
    'item_stats': ItemStatRecord,
    'order_totals': OrderTotalRecord,
    'category_metrics': CategoryMetricRecord,
}

ID_COLUMNS = ['item_id', 'order_id', 'order_details_id']


def _ids_as_text(df):
    df = df.copy()
    for col in ID_COLUMNS:
        if col in df.columns:
            df[col] = df[col].map(lambda v: None if pd.isna(v) else str(v))
    return df


def write_report(report_text, file_path):
    """
    Write the rendered report to disk.
    """
    output_dir = os.path.dirname(file_path)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(report_text)

    logger.info(f"Wrote report to {file_path}")
    return file_path


def export_results_to_csv(report_tables, output_dir):
    """
    Export report tables to CSV files.

    Returns:
        dict: table name -> file path
    """
    # Create output directory if it doesn't exist
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    exported_files = {}

    # Export each DataFrame to CSV
    for name, df in report_tables.items():
        if df is not None and len(df) > 0:
            file_path = os.path.join(output_dir, f"{name}.csv")
            df.to_csv(file_path, index=False)
            exported_files[name] = file_path
            logger.info(f"Exported {len(df)} rows to {file_path}")
        else:
            logger.warning(f"No data to export for {name}")

    return exported_files


def _load_table(engine, df, table_name, model=None):
    """
    Replace the contents of a table with `df`.

    Tables with a model keep their declared schema: rows are deleted and
    re-inserted. Other tables are recreated by pandas.
    """
    try:
        with engine.begin() as conn:
            if model is not None:
                conn.execute(delete(model.__table__))
                df.to_sql(table_name, conn, if_exists='append', index=False)
            else:
                df.to_sql(table_name, conn, if_exists='replace', index=False)
        logger.info(f"Successfully loaded {len(df)} rows to {table_name}")
    except SQLAlchemyError as e:
        logger.error(f"Error loading to {table_name}: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def stage_base_tables(engine, catalog, order_log):
    """
    Write the validated menu and order tables to the database so that later
    runs can read them with source=database.
    """
    logger.info("Staging base tables")

    menu_df = _ids_as_text(catalog.to_frame())
    orders_df = _ids_as_text(order_log.to_frame())

    _load_table(engine, menu_df, MenuItemRecord.__tablename__, MenuItemRecord)
    _load_table(engine, orders_df, OrderDetailRecord.__tablename__, OrderDetailRecord)

    return {
        MenuItemRecord.__tablename__: len(menu_df),
        OrderDetailRecord.__tablename__: len(orders_df),
    }


def load_report_tables(engine, report_tables):
    """
    Load report tables to the database.

    Returns:
        dict: table name -> rows written
    """
    logger.info("Loading report tables to the database")
    written = {}
    for name, df in report_tables.items():
        _load_table(engine, _ids_as_text(df), name, REPORT_MODELS.get(name))
        written[name] = len(df)
    return written
