"""Credit ledger: spending credits on score actions and bulk replenishment.

All credit and score mutation goes through guarded UPDATE statements.
Nothing here reads ``credits`` and writes it back, so two spends racing
on one account can never both take its last credit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from leaderboarder import db
from leaderboarder.errors import InvalidAction, StorageFailure
from leaderboarder.models import Account


class Action(str, Enum):
    INCREMENT_SELF = 'increment-self'
    ATTACK = 'attack'

    @classmethod
    def parse(cls, value) -> 'Action':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidAction(value) from None


@dataclass
class SpendResult:
    spent: bool
    action: Action
    account_id: int
    target_id: Optional[int] = None

    def to_dict(self):
        return {
            'spent': self.spent,
            'action': self.action.value,
            'account_id': self.account_id,
            'target_id': self.target_id,
        }


def _take_credit(account_id: int) -> int:
    return (
        Account.query
        .filter(Account.id == account_id, Account.credits > 0)
        .update({Account.credits: Account.credits - 1}, synchronize_session=False)
    )


def _adjust_score(account_id: int, delta: int) -> int:
    return (
        Account.query
        .filter(Account.id == account_id)
        .update({Account.score: Account.score + delta}, synchronize_session=False)
    )


def spend_credit(account_id: int, action, target_id: Optional[int] = None) -> SpendResult:
    """Spend one credit of ``account_id`` on ``action``.

    - increment-self: +1 to the spender's score
    - attack: -1 to ``target_id``'s score; with no target the credit is
      still consumed and no score changes

    The decrement and the score change commit together or not at all.
    Returns ``spent=False`` (not an error) when the account has no credits.
    """
    act = Action.parse(action)
    try:
        taken = _take_credit(account_id)
        if taken != 1:
            db.session.rollback()
            current_app.logger.info(
                f"[spend] account={account_id} action={act.value} target={target_id} spent=False"
            )
            return SpendResult(spent=False, action=act, account_id=account_id, target_id=target_id)

        if act is Action.INCREMENT_SELF:
            _adjust_score(account_id, 1)
        elif target_id is not None:
            _adjust_score(target_id, -1)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[spend-failed] account={account_id} action={act.value} error={exc}")
        raise StorageFailure(str(exc)) from exc

    current_app.logger.info(
        f"[spend] account={account_id} action={act.value} target={target_id} spent=True"
    )
    return SpendResult(spent=True, action=act, account_id=account_id, target_id=target_id)


def replenish_all() -> int:
    """Give every account one more credit. Returns the number of accounts updated."""
    try:
        updated = Account.query.update(
            {Account.credits: Account.credits + 1}, synchronize_session=False
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[replenish-failed] error={exc}")
        raise StorageFailure(str(exc)) from exc
    current_app.logger.info(f"[replenish] accounts={updated}")
    return updated
