from acemon.battle.factory import create_instance
from acemon.battle.party import Party


def _team(catalog, n):
    return Party([create_instance(catalog.get(16), 5 + i) for i in range(n)])


def test_party_limit(catalog):
    party = _team(catalog, 6)
    assert party.is_full()
    assert not party.add(create_instance(catalog.get(19), 3))
    assert len(party) == 6


def test_duplicate_uid_rejected(catalog):
    party = _team(catalog, 1)
    assert not party.add(party[0])
    # same species, new instance is fine
    assert party.add(create_instance(catalog.get(16), 5))


def test_cannot_remove_last_member(catalog):
    party = _team(catalog, 1)
    assert party.remove(0) is None
    party.add(create_instance(catalog.get(19), 3))
    removed = party.remove(0)
    assert removed is not None and removed.species.id == 16
    assert len(party) == 1


def test_promote_moves_member_to_front(catalog):
    party = _team(catalog, 3)
    levels = [m.level for m in party]
    chosen = party.promote(2)
    assert chosen is not None
    assert [m.level for m in party] == [levels[2], levels[0], levels[1]]
    assert party.promote(0) is None
    assert party.promote(5) is None


def test_first_available_and_levels(catalog):
    party = _team(catalog, 3)
    party[0].take_damage(999)
    assert party.first_available() == 1
    for m in party:
        m.take_damage(999)
    assert not party.has_available()
    party.heal_all()
    assert party.first_available() == 0
    assert party.highest_level() == 7
    assert party.average_level() == 6
