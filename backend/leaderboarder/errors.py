"""Error taxonomy shared by the ledger, the leaderboard engine and the HTTP layer.

Every error carries the HTTP status the web layer should answer with, so
routes never need to translate exceptions by hand.
"""


class LeaderboarderError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class InvalidAction(LeaderboarderError):
    """A credit was spent on an action outside the allow-list."""
    status_code = 400

    def __init__(self, action):
        super().__init__(f'Invalid action: {action!r}')
        self.action = action


class InvalidRequest(LeaderboarderError):
    status_code = 400


class InvalidLeaderboard(InvalidRequest):
    pass


class NotFound(LeaderboarderError):
    status_code = 404


class StorageFailure(LeaderboarderError):
    """The store was unavailable or rejected a write."""
    status_code = 500


class UsernameTaken(StorageFailure):
    status_code = 409

    def __init__(self, username):
        super().__init__(f'Username already exists: {username}')
        self.username = username
