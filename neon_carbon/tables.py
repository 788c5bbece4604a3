"""
Key-based join, selection and deduplication over pandas tables.

All joins are inner joins unless stated otherwise: unmatched rows are
dropped, and ``join_retention`` can be used to check how many survived.
"""

import logging
from typing import List, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

Keys = Union[str, Sequence[str]]


def _as_list(keys: Keys) -> List[str]:
    return [keys] if isinstance(keys, str) else list(keys)


def select(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """
    Project a table onto a column subset.

    Raises
    ------
    KeyError
        If any requested column is missing
    """
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in table: {missing}")
    return df.loc[:, list(columns)].copy()


def first_per_key(df: pd.DataFrame, keys: Keys) -> pd.DataFrame:
    """Keep the first row for each key value."""
    return df.drop_duplicates(subset=_as_list(keys), keep='first').reset_index(drop=True)


def inner_join(left: pd.DataFrame, right: pd.DataFrame, on: Keys) -> pd.DataFrame:
    """
    Inner-join two tables on one or more key columns.

    Row multiplicity is preserved: a left row matching two right rows
    appears twice. Unmatched rows on either side are dropped.

    Parameters
    ----------
    left, right : pd.DataFrame
        Tables sharing the key columns
    on : str or sequence of str
        Key column name(s)

    Returns
    -------
    pd.DataFrame
        Joined table
    """
    keys = _as_list(on)
    joined = left.merge(right, on=keys, how='inner')

    n_dropped = len(left) - len(left.merge(right[keys].drop_duplicates(), on=keys, how='inner'))
    if n_dropped:
        logger.debug("Inner join on %s dropped %d unmatched left row(s)", keys, n_dropped)

    return joined


def lookup(
    left: pd.DataFrame,
    right: pd.DataFrame,
    on: Keys,
    columns: Sequence[str]
) -> pd.DataFrame:
    """
    Attach columns from a one-row-per-key table to every row of ``left``.

    Rows without a match keep NaN in the attached columns instead of being
    dropped.

    Raises
    ------
    pandas.errors.MergeError
        If ``right`` has more than one row for a key
    """
    keys = _as_list(on)
    return left.merge(
        right[keys + list(columns)],
        on=keys,
        how='left',
        validate='many_to_one'
    )


def join_retention(left: pd.DataFrame, joined: pd.DataFrame) -> float:
    """
    Fraction of left rows represented in a join result.

    Values below 1 mean rows were dropped; values above 1 mean rows were
    multiplied by repeated keys.
    """
    if len(left) == 0:
        return 1.0
    return len(joined) / len(left)
