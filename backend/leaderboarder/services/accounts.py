"""Account and session collaborators used by the HTTP layer.

Nothing in the ledger or leaderboard engine depends on this module. It
creates accounts, checks passwords, keeps ``last_active`` current and
maps bearer tokens to account ids.
"""

from datetime import datetime
from typing import Optional
import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from leaderboarder import db
from leaderboarder.errors import InvalidRequest, StorageFailure, UsernameTaken
from leaderboarder.models import Account, AuthToken


def normalize_username(username) -> str:
    if username is None:
        return ''
    if not isinstance(username, str):
        raise InvalidRequest('username must be a string')
    return username.strip().lower()


def create_account(username, password=None, geography=None, sex=None, age_group=None,
                   credits=0, score=0) -> Account:
    normalized = normalize_username(username)
    if not normalized:
        raise InvalidRequest("Username required")
    account = Account(
        username=normalized,
        geography=geography,
        sex=sex,
        age_group=age_group,
        credits=credits,
        score=score,
    )
    if password:
        account.set_password(password)
    try:
        db.session.add(account)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise UsernameTaken(normalized) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc
    current_app.logger.info(f"[account-create] id={account.id} username={normalized}")
    return account


def get_account_by_username(username) -> Optional[Account]:
    return Account.query.filter_by(username=normalize_username(username)).first()


def authenticate(username, password) -> Optional[Account]:
    account = get_account_by_username(username)
    if account and account.check_password(password):
        return account
    return None


def touch_last_active(account_id: int) -> None:
    try:
        Account.query.filter_by(id=account_id).update(
            {Account.last_active: datetime.now()}, synchronize_session=False
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc


# ---- Session tokens ----

def issue_token(account_id: int) -> str:
    token = str(uuid.uuid4())
    try:
        db.session.add(AuthToken(token=token, account_id=account_id))
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc
    return token


def resolve_token(token: str) -> Optional[int]:
    row = db.session.get(AuthToken, token) if token else None
    return row.account_id if row else None


def revoke_token(token: str) -> bool:
    try:
        deleted = AuthToken.query.filter_by(token=token).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailure(str(exc)) from exc
    return bool(deleted)
