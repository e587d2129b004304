"""Compile leaderboard filter mappings into SQLAlchemy predicates."""

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import extract, or_

from leaderboarder.models import Account


class FilterKey(str, Enum):
    GEOGRAPHY = 'geography'
    SEX = 'sex'
    AGE_GROUP = 'age_group'
    TIME_OF_DAY = 'time_of_day'


# Inclusive hour ranges of last_active; night wraps midnight
TIME_OF_DAY_BUCKETS = {
    'morning': ((6, 11),),
    'afternoon': ((12, 17),),
    'evening': ((18, 21),),
    'night': ((22, 23), (0, 5)),
}


def _last_active_hour():
    return extract('hour', Account.last_active)


def time_of_day_predicate(label: Any):
    """Return the hour-range predicate for a time-of-day label, or None if unsupported."""
    ranges = TIME_OF_DAY_BUCKETS.get(label) if isinstance(label, str) else None
    if not ranges:
        return None
    hour = _last_active_hour()
    clauses = [hour.between(low, high) for low, high in ranges]
    return clauses[0] if len(clauses) == 1 else or_(*clauses)


def _equals(column):
    def compile_equality(value):
        return column == value
    return compile_equality


FILTER_COMPILERS: Dict[FilterKey, Callable[[Any], Any]] = {
    FilterKey.GEOGRAPHY: _equals(Account.geography),
    FilterKey.SEX: _equals(Account.sex),
    FilterKey.AGE_GROUP: _equals(Account.age_group),
    FilterKey.TIME_OF_DAY: time_of_day_predicate,
}


def _parse_key(key) -> Optional[FilterKey]:
    try:
        return FilterKey(key)
    except ValueError:
        return None


def compile_filter(key, value):
    """Compile one filter entry. Unknown keys and unsupported values yield None."""
    filter_key = _parse_key(key)
    if filter_key is None:
        return None
    return FILTER_COMPILERS[filter_key](value)


def compile_filters(filters: Optional[Mapping[str, Any]]) -> List[Any]:
    predicates = []
    for key, value in (filters or {}).items():
        predicate = compile_filter(key, value)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def unknown_filter_keys(filters: Optional[Mapping[str, Any]]) -> List[str]:
    return sorted(str(key) for key in (filters or {}) if _parse_key(key) is None)
