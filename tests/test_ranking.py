import pandas as pd

from menu_analysis.transformation.ranking import dense_rank, add_dense_rank


def test_dense_rank_shares_ranks_without_gaps():
    assert dense_rank([5, 5, 3, 1, 1]).tolist() == [1, 1, 2, 3, 3]


def test_dense_rank_ascending():
    assert dense_rank([5, 5, 3, 1, 1], ascending=True).tolist() == [3, 3, 2, 1, 1]


def test_dense_rank_keeps_index():
    series = pd.Series([10, 20, 10], index=['a', 'b', 'c'])

    ranks = dense_rank(series)

    assert ranks.to_dict() == {'a': 2, 'b': 1, 'c': 2}


def test_dense_rank_empty():
    assert dense_rank([]).empty


def test_add_dense_rank_copies():
    df = pd.DataFrame({'lines': [14, 14, 12]})

    ranked = add_dense_rank(df, 'lines')

    assert ranked['rank'].tolist() == [1, 1, 2]
    assert 'rank' not in df.columns
