"""Role assignment: exact counts and uniform, independent arrangements.

The statistical tests compare observed arrangement frequencies to the uniform
distribution with a chi-square statistic. Critical values are for p = 0.001.
"""

import random
from collections import Counter
from itertools import pairwise

import pytest

from mafia.rooms.errors import RoleCountMismatch
from mafia.rooms.lifecycle import RoomLifecycle
from mafia.rooms.models import Player, Role, Room, RoomConfig
from mafia.rooms.roles import RoleAssigner, build_roles

CHI2_CRITICAL_DF5 = 20.515
CHI2_CRITICAL_DF19 = 43.820
CHI2_CRITICAL_DF35 = 66.619


def chi_square(observed: Counter, categories: int, trials: int) -> float:
    expected = trials / categories
    missing = categories - len(observed)
    assert missing >= 0
    # An empty cell contributes (0 - expected)^2 / expected == expected.
    return sum((count - expected) ** 2 / expected for count in observed.values()) + missing * expected


def make_room(total: int, mafia: int, angels: int, joined: int | None = None) -> Room:
    joined = total if joined is None else joined
    players = [Player.create("P0", is_host=True), *(Player.create(f"P{i}") for i in range(1, joined))]
    return Room(
        code="ROLES2",
        config=RoomConfig(total_players=total, mafia_count=mafia, angel_count=angels),
        players=players,
    )


class TestBuildRoles:
    def test_multiset_matches_config(self):
        roles = build_roles(RoomConfig(total_players=12, mafia_count=3, angel_count=2))
        assert Counter(roles) == {Role.MAFIA: 3, Role.ANGEL: 2, Role.CITIZEN: 7}

    def test_zero_angels(self):
        roles = build_roles(RoomConfig(total_players=4, mafia_count=1, angel_count=0))
        assert Counter(roles) == {Role.MAFIA: 1, Role.CITIZEN: 3}


class TestShuffle:
    def test_swap_indices_drawn_from_inclusive_range(self):
        bounds: list[int] = []

        def recording_randbelow(n: int) -> int:
            bounds.append(n)
            return 0

        RoleAssigner(randbelow=recording_randbelow).shuffle([Role.MAFIA, Role.ANGEL, Role.CITIZEN, Role.CITIZEN])
        # i runs from the last index down to 1; j is drawn from [0, i].
        assert bounds == [4, 3, 2]

    def test_shuffle_keeps_multiset(self):
        roles = build_roles(RoomConfig(total_players=9, mafia_count=2, angel_count=1))
        shuffled = RoleAssigner().shuffle(roles)
        assert Counter(shuffled) == Counter(roles)

    def test_shuffle_does_not_mutate_input(self):
        roles = [Role.MAFIA, Role.ANGEL, Role.CITIZEN]
        RoleAssigner().shuffle(roles)
        assert roles == [Role.MAFIA, Role.ANGEL, Role.CITIZEN]

    def test_distinct_roles_uniform_over_permutations(self):
        rng = random.Random(20240611)
        assigner = RoleAssigner(randbelow=rng.randrange)
        trials = 6000
        perms = Counter(tuple(assigner.shuffle([Role.MAFIA, Role.ANGEL, Role.CITIZEN])) for _ in range(trials))

        assert len(perms) == 6
        assert chi_square(perms, 6, trials) < CHI2_CRITICAL_DF5

    def test_multiset_uniform_over_arrangements(self):
        # 5 players, 1 Mafia, 1 Angel, 3 Citizens: 5!/3! = 20 distinct arrangements.
        rng = random.Random(7)
        assigner = RoleAssigner(randbelow=rng.randrange)
        roles = build_roles(RoomConfig(total_players=5, mafia_count=1, angel_count=1))
        trials = 10000
        arrangements = Counter(tuple(assigner.shuffle(roles)) for _ in range(trials))

        assert len(arrangements) == 20
        assert chi_square(arrangements, 20, trials) < CHI2_CRITICAL_DF19


class TestAssign:
    def test_every_player_gets_exactly_one_role(self):
        room = make_room(total=7, mafia=2, angels=1)
        RoleAssigner().assign(room)
        assert all(p.role is not None for p in room.players)
        assert Counter(p.role for p in room.players) == {Role.MAFIA: 2, Role.ANGEL: 1, Role.CITIZEN: 4}

    def test_roles_zip_onto_join_order(self):
        room = make_room(total=3, mafia=1, angels=1)
        # randbelow always 0: [M, A, C] -> i=2 swap(2,0) -> [C, A, M] -> i=1 swap(1,0) -> [A, C, M]
        RoleAssigner(randbelow=lambda _n: 0).assign(room)
        assert [p.role for p in room.players] == [Role.ANGEL, Role.CITIZEN, Role.MAFIA]

    def test_mismatch_raises_and_assigns_nothing(self):
        room = make_room(total=5, mafia=1, angels=1, joined=4)
        with pytest.raises(RoleCountMismatch):
            RoleAssigner().assign(room)
        assert all(p.role is None for p in room.players)


class TestRoundIndependence:
    def _cycle_assignments(self, cycles: int) -> list[tuple[Role | None, ...]]:
        room = make_room(total=3, mafia=1, angels=1)
        lifecycle = RoomLifecycle()
        host = room.host
        seen = []
        for _ in range(cycles):
            lifecycle.start(room, host)
            seen.append(tuple(p.role for p in room.players))
            lifecycle.reset(room, host)
        return seen

    def test_consecutive_rounds_are_independent(self):
        trials = 3600
        assignments = self._cycle_assignments(trials + 1)
        index = {perm: i for i, perm in enumerate(sorted(set(assignments)))}
        assert len(index) == 6

        pairs = Counter(index[a] * 6 + index[b] for a, b in pairwise(assignments))
        assert chi_square(pairs, 36, trials) < CHI2_CRITICAL_DF35

    def test_assigner_never_sees_round_seed(self):
        room = make_room(total=3, mafia=1, angels=1)
        received = []

        class RecordingAssigner(RoleAssigner):
            def assign(self, room):
                received.append(room.round_seed)
                super().assign(room)

        RoomLifecycle(assigner=RecordingAssigner()).start(room, room.host)
        # Seed is generated after roles are assigned.
        assert received == [None]
        assert room.round_seed is not None
