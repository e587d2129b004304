from datetime import datetime
import json

from flask_login import UserMixin

from leaderboarder import db, bcrypt
from leaderboarder.errors import StorageFailure


class Account(UserMixin, db.Model):
    __tablename__ = 'account'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=True)
    credits = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Integer, nullable=False, default=0)
    geography = db.Column(db.String(64), nullable=True)
    sex = db.Column(db.String(32), nullable=True)
    age_group = db.Column(db.String(32), nullable=True)
    # Server-local time; the time_of_day filter buckets on its hour
    last_active = db.Column(db.DateTime, nullable=True, default=datetime.now)

    __table_args__ = (
        db.CheckConstraint('credits >= 0', name='ck_account_credits_non_negative'),
    )

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash or password is None:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self, include_private=False):
        data = {
            'id': self.id,
            'username': self.username,
            'score': self.score,
            'geography': self.geography,
            'sex': self.sex,
            'age_group': self.age_group,
        }
        if include_private:
            data['credits'] = self.credits
            data['last_active'] = self.last_active.isoformat() if self.last_active else None
        return data


class Leaderboard(db.Model):
    __tablename__ = 'leaderboard'
    id = db.Column(db.Integer, primary_key=True)
    creator_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=True)
    name = db.Column(db.String(128), nullable=False)
    filters = db.Column(db.Text, nullable=False, default='{}')  # JSON-encoded filter mapping
    min_users = db.Column(db.Integer, nullable=False, default=5)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    creator = db.relationship('Account')

    @property
    def filter_map(self):
        # A corrupt definition must not silently rank every account
        try:
            decoded = json.loads(self.filters) if self.filters else {}
        except ValueError as exc:
            raise StorageFailure(f"Leaderboard {self.id} has unreadable filters") from exc
        if not isinstance(decoded, dict):
            raise StorageFailure(f"Leaderboard {self.id} filters are not an object")
        return decoded

    def to_dict(self):
        return {
            'id': self.id,
            'creator_id': self.creator_id,
            'name': self.name,
            'filters': self.filter_map,
            'min_users': self.min_users,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class AuthToken(db.Model):
    __tablename__ = 'auth_token'
    token = db.Column(db.String(64), primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
