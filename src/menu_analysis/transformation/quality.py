"""
Data quality checks for the menu analysis pipeline.

These checks never modify or drop data. Anything that would make a report
wrong is raised during loading or joining; what is found here is only
reported.
"""
import logging
import traceback

from menu_analysis.transformation.joins import check_for_missing_relationships

logger = logging.getLogger(__name__)

# Primary keys for each table
PRIMARY_KEYS = {
    'menu_items': ['item_id'],
    'order_details': ['order_details_id'],
}


def run_data_quality_checks(data_frames):
    """
    Run a series of data quality checks on the loaded tables.

    Args:
        data_frames (dict): {'menu_items': DataFrame, 'order_details': DataFrame}

    Returns:
        dict: results per check, plus 'total_issues'
    """
    try:
        logger.info("Running data quality checks")

        quality_results = {}

        # Run individual checks
        quality_results['missing_values'] = check_missing_values(data_frames)
        quality_results['duplicate_keys'] = check_duplicate_keys(data_frames)
        quality_results['value_ranges'] = check_value_ranges(data_frames)
        quality_results['referential_integrity'] = check_for_missing_relationships(
            data_frames['order_details'],
            data_frames['menu_items'],
        )

        total_issues = count_issues(quality_results)
        quality_results['total_issues'] = total_issues

        if total_issues > 0:
            logger.warning(f"Found a total of {total_issues} data quality issues")
        else:
            logger.info("All data quality checks passed")

        return quality_results
    except Exception as e:
        logger.error(f"Error running data quality checks: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def count_issues(quality_results):
    total = 0
    for result in quality_results.get('missing_values', {}).values():
        total += result['total_missing']
    for result in quality_results.get('duplicate_keys', {}).values():
        total += result['duplicate_count']
    for table_results in quality_results.get('value_ranges', {}).values():
        for result in table_results.values():
            total += result['invalid_count']
    relationships = quality_results.get('referential_integrity', {})
    total += relationships.get('unknown_items_count', 0)
    return int(total)


def check_missing_values(data_frames):
    """
    Check for missing values in each DataFrame.

    The optional order_details_id column is skipped when the source did not
    provide it at all.
    """
    results = {}

    for table_name, df in data_frames.items():
        checked = df
        if 'order_details_id' in df.columns and df['order_details_id'].isna().all():
            checked = df.drop(columns=['order_details_id'])

        # Get count of missing values by column
        missing_by_column = checked.isnull().sum()
        total_missing = int(missing_by_column.sum())

        # Only include columns with missing values
        missing_columns = {
            col: int(count) for col, count in missing_by_column[missing_by_column > 0].items()
        }

        results[table_name] = {
            'total_missing': total_missing,
            'missing_columns': missing_columns
        }

        if total_missing > 0:
            logger.warning(f"Table '{table_name}' has {total_missing} missing values")
            for col, count in missing_columns.items():
                logger.warning(f"  - Column '{col}': {count} missing values")

    return results


def check_duplicate_keys(data_frames):
    """
    Check for duplicate primary keys, plus duplicate dish names on the menu.
    """
    results = {}

    for table_name, df in data_frames.items():
        pk_columns = PRIMARY_KEYS.get(table_name)
        if not pk_columns or not all(col in df.columns for col in pk_columns):
            results[table_name] = {'duplicate_count': 0, 'duplicate_keys': []}
            continue

        keyed = df.dropna(subset=pk_columns)
        duplicates = keyed[keyed.duplicated(subset=pk_columns, keep=False)]
        duplicate_count = len(duplicates)

        results[table_name] = {
            'duplicate_count': duplicate_count,
            'duplicate_keys': duplicates[pk_columns].head(10).values.tolist() if duplicate_count > 0 else []
        }

        if duplicate_count > 0:
            logger.warning(f"Table '{table_name}' has {duplicate_count} duplicate primary keys")

    menu_df = data_frames.get('menu_items')
    if menu_df is not None and 'item_name' in menu_df.columns:
        names = menu_df[menu_df.duplicated(subset=['item_name'], keep=False)]
        results['menu_item_names'] = {
            'duplicate_count': len(names),
            'duplicate_keys': sorted(names['item_name'].unique().tolist())[:10]
        }
        if len(names) > 0:
            logger.warning(f"Menu has {len(names)} items sharing a name with another item")

    return results


def check_value_ranges(data_frames):
    """
    Check for values outside of expected ranges.
    """
    results = {}

    # Define expected value ranges and conditions
    range_checks = {
        'menu_items': {
            'price_cents': lambda x: x > 0,  # Free dishes are suspicious
        },
    }

    for table_name, df in data_frames.items():
        table_results = {}

        for column, condition in range_checks.get(table_name, {}).items():
            if column not in df.columns:
                continue
            # Apply condition and count failures
            invalid_mask = ~df[column].apply(condition).astype(bool)
            invalid_count = int(invalid_mask.sum())

            table_results[column] = {
                'invalid_count': invalid_count,
                'invalid_examples': df.loc[invalid_mask, column].head(5).tolist() if invalid_count > 0 else []
            }

            if invalid_count > 0:
                logger.warning(f"Table '{table_name}' has {invalid_count} invalid values in column '{column}'")

        results[table_name] = table_results

    return results
