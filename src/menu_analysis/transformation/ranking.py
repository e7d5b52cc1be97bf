"""
Tied ranking helpers.
"""
import pandas as pd


def dense_rank(values, ascending=False):
    """
    Rank values so that equal values share a rank and the next distinct
    value gets the following rank (1, 1, 2, ...), like SQL DENSE_RANK.

    Args:
        values: Series or list-like of comparable values
        ascending (bool): rank the smallest value first when True

    Returns:
        pd.Series: integer ranks aligned with `values`
    """
    series = values if isinstance(values, pd.Series) else pd.Series(list(values))
    if series.empty:
        return pd.Series([], index=series.index, dtype='int64')
    return series.rank(method='dense', ascending=ascending).astype('int64')


def add_dense_rank(df, column, ascending=False, rank_column='rank'):
    """Return a copy of `df` with a dense rank over `column`."""
    ranked = df.copy()
    ranked[rank_column] = dense_rank(ranked[column], ascending=ascending)
    return ranked
