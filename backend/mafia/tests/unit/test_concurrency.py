"""Concurrent requests against one room never break its invariants."""

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from mafia.rooms.errors import AlreadyStarted, IncompletePlayers, RoomError, RoomFull
from mafia.rooms.models import Role, RoomStatus

WORKERS = 32


def _run_all(fn, args_list):
    """Run fn for every args tuple, releasing all threads at once."""
    barrier = threading.Barrier(len(args_list))

    def call(args):
        barrier.wait()
        try:
            return fn(*args)
        except RoomError as e:
            return e

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        return list(pool.map(call, args_list))


class TestConcurrentJoins:
    @pytest.mark.parametrize("total_players", [3, 5, 10])
    def test_joins_never_exceed_capacity(self, service, registry, total_players):
        host = service.create_room("Ana", total_players, 1, 0)
        results = _run_all(service.join_room, [(host.room_code, f"P{i}") for i in range(WORKERS)])

        admitted = [r for r in results if not isinstance(r, RoomError)]
        rejected = [r for r in results if isinstance(r, RoomError)]
        room = registry.lookup(host.room_code)

        assert len(admitted) == total_players - 1
        assert all(isinstance(r, RoomFull) for r in rejected)
        assert room.player_count == total_players
        assert sum(p.is_host for p in room.players) == 1

    def test_same_name_admitted_once(self, service, registry):
        host = service.create_room("Ana", 10, 1, 0)
        results = _run_all(service.join_room, [(host.room_code, "Bo")] * WORKERS)

        assert sum(not isinstance(r, RoomError) for r in results) == 1
        assert registry.lookup(host.room_code).player_count == 2


class TestConcurrentStart:
    def test_only_one_start_wins(self, service, registry, full_room):
        host = full_room[0]
        results = _run_all(service.start_room, [(host.room_code, host.token)] * WORKERS)

        winners = [r for r in results if not isinstance(r, RoomError)]
        assert len(winners) == 1
        assert all(isinstance(r, AlreadyStarted) for r in results if isinstance(r, RoomError))

        room = registry.lookup(host.room_code)
        assert room.round_seed == winners[0].seed
        assert Counter(p.role for p in room.players) == {Role.MAFIA: 1, Role.ANGEL: 1, Role.CITIZEN: 3}

    def test_late_join_racing_start(self, service, registry, host_grant):
        code = host_grant.room_code
        for name in ["Bo", "Cy", "Dee"]:
            service.join_room(code, name)

        def start_when_possible():
            try:
                return service.start_room(code, host_grant.token)
            except RoomError as e:
                return e

        join_result, start_result = _run_all(
            lambda kind: service.join_room(code, "Evy") if kind == "join" else start_when_possible(),
            [("join",), ("start",)],
        )

        room = registry.lookup(code)
        # Whichever runs first, the join is admitted: either it fills the room
        # before the start, or the start fails and leaves the room waiting.
        assert not isinstance(join_result, RoomError)
        assert room.player_count == 5
        if room.status == RoomStatus.STARTED:
            assert all(p.role is not None for p in room.players)
        else:
            assert isinstance(start_result, IncompletePlayers)
            assert all(p.role is None for p in room.players)


class TestConcurrentResetAndView:
    def test_views_consistent_during_cycles(self, service, full_room):
        host = full_room[0]
        code = host.room_code
        stop = threading.Event()
        bad_views = []

        def cycle():
            for _ in range(200):
                service.start_room(code, host.token)
                service.reset_room(code, host.token)
            stop.set()

        def watch(token):
            while not stop.is_set():
                view = service.view_room(code, token)
                started = view.status == RoomStatus.STARTED
                if started != (view.round is not None) or view.joined_players != 5:
                    bad_views.append(view)

        threads = [threading.Thread(target=cycle)] + [
            threading.Thread(target=watch, args=(g.token,)) for g in full_room[1:]
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert bad_views == []
