"""Leaderboard engine: ranked candidate sets and the creation admission rule.

Leaderboard membership is never stored. Every fetch re-runs the saved
filters against current account state, so rankings are always live.
"""

from dataclasses import dataclass, field
import json
from typing import Any, Dict, List, Mapping, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from leaderboarder import db
from leaderboarder.errors import InvalidLeaderboard, NotFound, StorageFailure
from leaderboarder.models import Account, Leaderboard
from .filters import compile_filters, unknown_filter_keys

DEFAULT_OVERFETCH = 10
# Signed 32-bit INTEGER bound shared by SQLite and PostgreSQL
MAX_MIN_USERS = 2**31 - 1

_SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass
class CreateResult:
    status: str  # created | invalid
    leaderboard: Leaderboard
    members: List[Account] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.status == 'created'

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'status': self.status,
            'leaderboard': self.leaderboard.to_dict(),
        }
        if self.created:
            payload['members'] = [m.to_dict() for m in self.members]
        else:
            payload['reason'] = self.reason
        return payload


def _overfetch() -> int:
    try:
        return int(current_app.config.get('LEADERBOARD_OVERFETCH', DEFAULT_OVERFETCH))
    except (TypeError, ValueError):
        return DEFAULT_OVERFETCH


def _validate(name, filters, min_users) -> None:
    if not isinstance(name, str) or not name.strip():
        raise InvalidLeaderboard('Leaderboard name is required')
    if isinstance(min_users, bool) or not isinstance(min_users, int) or min_users < 0:
        raise InvalidLeaderboard('min_users must be a non-negative integer')
    if min_users > MAX_MIN_USERS:
        raise InvalidLeaderboard(f'min_users must be at most {MAX_MIN_USERS}')
    if not isinstance(filters, Mapping):
        raise InvalidLeaderboard('filters must be an object')
    for key, value in filters.items():
        if not isinstance(value, _SCALAR_TYPES):
            raise InvalidLeaderboard(f'Filter {key!r} must be a scalar value')
    if current_app.config.get('STRICT_FILTER_KEYS'):
        unknown = unknown_filter_keys(filters)
        if unknown:
            raise InvalidLeaderboard(f"Unknown filter keys: {', '.join(unknown)}")


def candidate_query(filters: Optional[Mapping[str, Any]], min_users: int, overfetch: Optional[int] = None):
    """Query for accounts matching every filter, best score first.

    Ties on score go to the lower id. The page is capped at
    ``min_users + overfetch`` rows, so very large matching populations
    are truncated.
    """
    buffer = _overfetch() if overfetch is None else overfetch
    return (
        Account.query
        .filter(*compile_filters(filters))
        .order_by(Account.score.desc(), Account.id.asc())
        .limit(max(0, int(min_users)) + buffer)
    )


def build_candidate_query(filters: Optional[Mapping[str, Any]], min_users: int, overfetch: Optional[int] = None) -> List[Account]:
    try:
        return candidate_query(filters, min_users, overfetch).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc


def create_leaderboard(creator_id: int, name: str, filters: Optional[Mapping[str, Any]], min_users: int) -> CreateResult:
    """Persist a leaderboard definition, then evaluate the admission rule.

    The definition is stored even when the leaderboard is invalid, so it
    can be fetched and re-ranked later. It is valid iff at least
    ``min_users`` accounts match and the creator ranks first among them.
    """
    filters = {} if filters is None else filters
    _validate(name, filters, min_users)

    leaderboard = Leaderboard(
        creator_id=creator_id,
        name=name.strip(),
        filters=json.dumps(dict(filters)),
        min_users=min_users,
    )
    try:
        db.session.add(leaderboard)
        db.session.flush()
        candidates = candidate_query(filters, min_users).all()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[leaderboard-create-failed] creator={creator_id} error={exc}")
        raise StorageFailure(str(exc)) from exc

    if len(candidates) < min_users:
        result = CreateResult(
            status='invalid',
            leaderboard=leaderboard,
            reason=f'Does not meet criteria: {len(candidates)} qualifying accounts, {min_users} required',
        )
    elif not candidates or candidates[0].id != creator_id:
        result = CreateResult(
            status='invalid',
            leaderboard=leaderboard,
            reason='Does not meet criteria: creator does not have the top score',
        )
    else:
        result = CreateResult(status='created', leaderboard=leaderboard, members=candidates)

    current_app.logger.info(
        f"[leaderboard-create] id={leaderboard.id} creator={creator_id} status={result.status} candidates={len(candidates)}"
    )
    return result


def get_leaderboard(leaderboard_id: int) -> Leaderboard:
    try:
        leaderboard = db.session.get(Leaderboard, leaderboard_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc
    if leaderboard is None:
        raise NotFound(f'Leaderboard {leaderboard_id} not found')
    return leaderboard


def fetch_leaderboard(leaderboard_id: int) -> Dict[str, Any]:
    """Load a definition and rank its members against current account state."""
    leaderboard = get_leaderboard(leaderboard_id)
    members = build_candidate_query(leaderboard.filter_map, leaderboard.min_users)
    return {
        'leaderboard': leaderboard,
        'members': members,
    }
