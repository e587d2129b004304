import json

import pytest

from leaderboarder import db
from leaderboarder.errors import InvalidLeaderboard, NotFound, StorageFailure
from leaderboarder.models import Leaderboard
from leaderboarder.services.leaderboards import (
    build_candidate_query,
    create_leaderboard,
    fetch_leaderboard,
)
from leaderboarder.services.ledger import spend_credit


def _names(accounts):
    return [a.username for a in accounts]


def test_ranking_orders_by_score_then_id(make_account):
    first = make_account('first', score=5)
    second = make_account('second', score=5)
    make_account('top', score=9)
    make_account('low', score=-1)

    for _ in range(3):
        ranked = build_candidate_query({}, 1)
        assert _names(ranked) == ['top', 'first', 'second', 'low']
    assert first.id < second.id


def test_candidates_capped_at_min_users_plus_overfetch(make_account):
    for i in range(15):
        make_account(f'user{i:02d}', score=i)

    assert len(build_candidate_query({}, 2)) == 12
    assert len(build_candidate_query({}, 2, overfetch=0)) == 2
    assert _names(build_candidate_query({}, 0, overfetch=3)) == ['user14', 'user13', 'user12']


def test_overfetch_is_configurable(flask_app, make_account):
    for i in range(8):
        make_account(f'user{i}', score=i)
    flask_app.config['LEADERBOARD_OVERFETCH'] = 1
    assert len(build_candidate_query({}, 3)) == 4


def test_filters_are_conjunctive(make_account):
    make_account('alice', geography='north', sex='f', score=3)
    make_account('bob', geography='north', sex='m', score=4)
    make_account('cara', geography='south', sex='f', score=5)

    assert _names(build_candidate_query({'geography': 'north', 'sex': 'f'}, 1)) == ['alice']
    assert _names(build_candidate_query({'geography': 'north', 'colour': 'red'}, 1)) == ['bob', 'alice']


def test_create_valid_when_creator_leads(make_account):
    alice = make_account('alice', geography='north', score=10)
    make_account('bob', geography='north', score=3)
    make_account('cara', geography='south', score=50)

    result = create_leaderboard(alice.id, 'Northern lights', {'geography': 'north'}, 2)
    assert result.status == 'created'
    assert _names(result.members) == ['alice', 'bob']
    payload = result.to_dict()
    assert payload['leaderboard']['filters'] == {'geography': 'north'}
    assert [m['username'] for m in payload['members']] == ['alice', 'bob']
    assert 'credits' not in payload['members'][0]


def test_create_invalid_when_too_few_candidates(make_account):
    alice = make_account('alice', geography='north', score=10)

    result = create_leaderboard(alice.id, 'Lonely', {'geography': 'north'}, 3)
    assert result.status == 'invalid'
    assert '3 required' in result.reason
    assert 'members' not in result.to_dict()


def test_create_invalid_when_creator_not_first(make_account):
    alice = make_account('alice', score=1)
    make_account('bob', score=2)

    result = create_leaderboard(alice.id, 'Underdog', {}, 1)
    assert result.status == 'invalid'
    assert 'top score' in result.reason


def test_create_invalid_when_creator_filtered_out(make_account):
    alice = make_account('alice', geography='north', score=100)
    make_account('bob', geography='south', score=1)

    result = create_leaderboard(alice.id, 'Southern', {'geography': 'south'}, 1)
    assert result.status == 'invalid'


def test_creator_wins_tie_only_with_lower_id(make_account):
    alice = make_account('alice', score=4)
    bob = make_account('bob', score=4)

    assert create_leaderboard(alice.id, 'Tie A', {}, 2).status == 'created'
    assert create_leaderboard(bob.id, 'Tie B', {}, 2).status == 'invalid'


def test_invalid_leaderboards_are_still_persisted(make_account):
    alice = make_account('alice', score=0)
    make_account('bob', score=1)

    result = create_leaderboard(alice.id, 'Kept anyway', {'sex': 'f'}, 5)
    assert result.status == 'invalid'

    stored = db.session.get(Leaderboard, result.leaderboard.id)
    assert stored is not None
    assert stored.name == 'Kept anyway'
    assert json.loads(stored.filters) == {'sex': 'f'}
    assert stored.min_users == 5
    assert stored.creator_id == alice.id


@pytest.mark.parametrize('name,filters,min_users', [
    ('', {}, 1),
    (None, {}, 1),
    ('Board', ['geography'], 1),
    ('Board', {}, -1),
    ('Board', {}, '3'),
    ('Board', {}, 2**31),
    ('Board', {}, 2**63),
    ('Board', {'geography': ['north', 'south']}, 1),
])
def test_create_rejects_malformed_requests(make_account, name, filters, min_users):
    alice = make_account('alice', score=1)
    with pytest.raises(InvalidLeaderboard):
        create_leaderboard(alice.id, name, filters, min_users)
    assert Leaderboard.query.count() == 0


def test_strict_mode_rejects_unknown_filter_keys(flask_app, make_account):
    alice = make_account('alice', score=1)
    flask_app.config['STRICT_FILTER_KEYS'] = True
    with pytest.raises(InvalidLeaderboard):
        create_leaderboard(alice.id, 'Typo', {'geograpy': 'north'}, 1)


def test_fetch_is_live(make_account):
    alice = make_account('alice', credits=0, score=2)
    bob = make_account('bob', credits=5, score=0)

    created = create_leaderboard(alice.id, 'Live', {}, 1)
    assert created.status == 'created'
    leaderboard_id = created.leaderboard.id

    fetched = fetch_leaderboard(leaderboard_id)
    assert _names(fetched['members']) == ['alice', 'bob']

    # bob overtakes alice
    for _ in range(3):
        assert spend_credit(bob.id, 'increment-self').spent

    fetched = fetch_leaderboard(leaderboard_id)
    assert _names(fetched['members']) == ['bob', 'alice']
    # the stored definition is untouched
    assert fetched['leaderboard'].name == 'Live'
    assert fetched['leaderboard'].min_users == 1
    assert fetched['leaderboard'].filter_map == {}


def test_fetch_unknown_leaderboard(app_ctx):
    with pytest.raises(NotFound):
        fetch_leaderboard(12345)


@pytest.mark.parametrize('stored_filters', ['not json', '["geography"]'])
def test_fetch_refuses_corrupt_stored_filters(make_account, stored_filters):
    alice = make_account('alice', score=1)
    make_account('bob', score=0, geography='south')
    leaderboard_id = create_leaderboard(alice.id, 'Corrupt', {'geography': 'north'}, 1).leaderboard.id

    db.session.get(Leaderboard, leaderboard_id).filters = stored_filters
    db.session.commit()

    # never falls back to ranking every account
    with pytest.raises(StorageFailure):
        fetch_leaderboard(leaderboard_id)
