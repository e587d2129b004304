"""Leaderboarder domain services: credit ledger, filters, leaderboards.

The ledger and leaderboard engine are the transactional core and are
imported by HTTP routes, socket handlers and the replenish timer. The
accounts and scheduler modules are the collaborators that call into them.
"""
