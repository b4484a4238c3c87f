"""
Grouping and counting of event records.

Keys are extracted from records into pandas object Series (None for a
missing or unusable value) and counted with groupby. A record is skipped
from an aggregation whenever one of its keys is None, so per-record data
errors never abort a whole chart.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd

from app.core.sanitization import is_valid_category_value
from app.core.schemas import TimeGranularity
from app.services.records import field_value, text_value
from app.services.temporal import bucket

logger = logging.getLogger(__name__)


def key_series(records: Sequence[Any], field_name: str) -> pd.Series:
    """Extract a field's grouping keys, one entry per record."""
    return pd.Series([text_value(r, field_name) for r in records], dtype=object)


def bucket_series(
    records: Sequence[Any],
    field_name: str,
    granularity: TimeGranularity = TimeGranularity.DAY,
    iso: bool = False
) -> pd.Series:
    """Extract time bucket keys, one entry per record (None when unparseable)."""
    return pd.Series([bucket(field_value(r, field_name), granularity, iso) for r in records], dtype=object)


def labelled(keys: pd.Series, label: Optional[str]) -> pd.Series:
    """Prefix usable keys with a dimension label ("Event Type: CRASH")."""
    if not label:
        return keys
    return keys.map(lambda v: f"{label}: {v}" if is_valid_category_value(v) else None)


def _valid(keys: pd.Series) -> pd.Series:
    return keys.map(is_valid_category_value).astype(bool)


def count_by(keys: pd.Series, limit: Optional[int] = None) -> List[Tuple[str, int]]:
    """
    Count occurrences of each key.

    Returns (key, count) pairs ordered by descending count; ties keep the
    order in which keys were first encountered. ``limit`` keeps the top N.
    """
    keys = keys[_valid(keys)]
    if keys.empty:
        return []

    counts = keys.groupby(keys, sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    if limit is not None:
        counts = counts.head(limit)
    return [(str(k), int(v)) for k, v in counts.items()]


@dataclass
class CrossCounts:
    """
    Nested counts for two grouping keys.

    ``table`` is an outer x inner integer frame with zero-filled gaps.
    ``outer_keys``/``inner_keys`` are the key universes in sorted order;
    the ``*_encounter`` lists keep first-seen order for tie-breaking.
    """

    table: pd.DataFrame
    outer_keys: List[str] = field(default_factory=list)
    inner_keys: List[str] = field(default_factory=list)
    outer_encounter: List[str] = field(default_factory=list)
    inner_encounter: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.outer_keys

    def count(self, outer: str, inner: str) -> int:
        if outer not in self.table.index or inner not in self.table.columns:
            return 0
        return int(self.table.at[outer, inner])

    def column(self, inner: str, outer_keys: Optional[Sequence[str]] = None) -> List[int]:
        """Counts of one inner key across the outer keys."""
        return [self.count(o, inner) for o in (outer_keys if outer_keys is not None else self.outer_keys)]

    def row(self, outer: str, inner_keys: Optional[Sequence[str]] = None) -> List[int]:
        """Counts of one outer key across the inner keys."""
        return [self.count(outer, i) for i in (inner_keys if inner_keys is not None else self.inner_keys)]

    def total(self) -> int:
        return int(self.table.to_numpy().sum()) if not self.empty else 0

    def max(self) -> int:
        return int(self.table.to_numpy().max()) if not self.empty else 0

    def top_outer(self, n: int) -> List[str]:
        """The n outer keys with the highest totals, ties by encounter order."""
        totals = self.table.sum(axis=1).reindex(self.outer_encounter)
        return [str(k) for k in totals.sort_values(ascending=False, kind="stable").head(n).index]

    def top_inner(self, n: int) -> List[str]:
        """The n inner keys with the highest totals, ties by encounter order."""
        totals = self.table.sum(axis=0).reindex(self.inner_encounter)
        return [str(k) for k in totals.sort_values(ascending=False, kind="stable").head(n).index]


def cross_count(outer: pd.Series, inner: pd.Series) -> CrossCounts:
    """
    Count records by an (outer, inner) key pair.

    Both series are aligned by position. Pairs where either key is missing
    or a sentinel are skipped, so the table total equals the number of
    records with both keys present.
    """
    frame = pd.DataFrame({
        "outer": outer.reset_index(drop=True),
        "inner": inner.reset_index(drop=True),
    }, dtype=object)
    usable = _valid(frame["outer"]) & _valid(frame["inner"])
    if not usable.all():
        logger.debug(f"Skipped {int((~usable).sum())} of {len(frame)} key pairs with missing values")
    frame = frame[usable]

    if frame.empty:
        return CrossCounts(table=pd.DataFrame(dtype=int))

    table = frame.groupby(["outer", "inner"], sort=False).size().unstack(fill_value=0)
    outer_keys = sorted(str(k) for k in table.index)
    inner_keys = sorted(str(k) for k in table.columns)
    table = table.reindex(index=outer_keys, columns=inner_keys, fill_value=0).astype(int)

    return CrossCounts(
        table=table,
        outer_keys=outer_keys,
        inner_keys=inner_keys,
        outer_encounter=[str(k) for k in pd.unique(frame["outer"])],
        inner_encounter=[str(k) for k in pd.unique(frame["inner"])],
    )


def stack_keys(outer: pd.Series, inners: Sequence[Tuple[Optional[str], pd.Series]]) -> Tuple[pd.Series, pd.Series]:
    """
    Pair one outer key with several inner dimensions.

    Each record contributes one (outer, inner) pair per inner dimension.
    Inner keys are prefixed with their label when one is given, so values
    from different dimensions never collide.
    """
    if not inners:
        empty = pd.Series([], dtype=object)
        return empty, empty
    outer = outer.reset_index(drop=True)
    stacked_outer = pd.concat([outer] * len(inners), ignore_index=True)
    stacked_inner = pd.concat(
        [labelled(keys.reset_index(drop=True), label) for label, keys in inners],
        ignore_index=True
    )
    return stacked_outer, stacked_inner
