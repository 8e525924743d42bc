"""Unit tests for CompletionMonitor and RepairStation."""

from __future__ import annotations

import random

import pytest

from stranded.comms.event_bus import EventBus
from stranded.simulation.completion import CompletionMonitor
from stranded.simulation.issues import IssueKind, IssueTracker
from stranded.simulation.phases import PhaseController, RunPhase
from stranded.simulation.repair import RepairStation

pytestmark = pytest.mark.unit


def _make_world():
    bus = EventBus()
    pc = PhaseController(bus)
    tracker = IssueTracker(pc, min_count=3, max_count=3, rng=random.Random(3))
    monitor = CompletionMonitor(pc, tracker)
    return monitor, tracker, pc, bus


def _resolve_all(tracker: IssueTracker) -> None:
    for issue in tracker.issues:
        tracker.resolve(issue.kind)


# --------------------------------------------------------------------------
# CompletionMonitor
# --------------------------------------------------------------------------

class TestCompletionMonitor:
    def test_inactive_outside_final_stand(self):
        monitor, tracker, pc, _ = _make_world()
        pc.transition_to(RunPhase.PREP)
        _resolve_all(tracker)
        assert not monitor.active
        assert monitor.tick(0.1) is False
        assert pc.current == RunPhase.PREP

    def test_active_in_final_stand(self):
        monitor, _, pc, _ = _make_world()
        pc.transition_to(RunPhase.FINAL_STAND)
        assert monitor.active

    def test_no_victory_while_unresolved(self):
        monitor, tracker, pc, _ = _make_world()
        pc.transition_to(RunPhase.FINAL_STAND)
        tracker.resolve(tracker.issues[0].kind)
        assert monitor.tick(0.1) is False
        assert pc.current == RunPhase.FINAL_STAND

    def test_single_victory_despite_repeated_ticks(self):
        monitor, tracker, pc, bus = _make_world()
        pc.transition_to(RunPhase.PREP)
        pc.transition_to(RunPhase.FINAL_STAND)
        q = bus.subscribe()
        _resolve_all(tracker)

        results = [monitor.tick(0.016) for _ in range(10)]

        assert results.count(True) == 1
        assert monitor.victories_triggered == 1
        assert pc.current == RunPhase.END_SUCCESS
        changes = []
        while not q.empty():
            msg = q.get_nowait()
            if msg["type"] == "phase_change":
                changes.append((msg["data"]["old"], msg["data"]["new"]))
        assert changes == [("final_stand", "end_success")]

    def test_exit_deactivates(self):
        monitor, _, pc, _ = _make_world()
        pc.transition_to(RunPhase.FINAL_STAND)
        pc.trigger_defeat()
        assert not monitor.active

    def test_missing_tracker_skips_check(self, log_records):
        pc = PhaseController()
        monitor = CompletionMonitor(pc, None)
        pc.transition_to(RunPhase.FINAL_STAND)
        assert monitor.tick(0.1) is False
        assert pc.current == RunPhase.FINAL_STAND
        assert any(level == "ERROR" for level, _ in log_records)


# --------------------------------------------------------------------------
# RepairStation
# --------------------------------------------------------------------------

def _make_station(duration: float = 3.0):
    pc = PhaseController()
    tracker = IssueTracker(pc, min_count=3, max_count=3, rng=random.Random(5))
    station = RepairStation(IssueKind.HULL_BREACH, pc, tracker, duration=duration)
    return station, tracker, pc


class TestRepairStation:
    def test_no_progress_outside_final_stand(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.PREP)
        station.player_enter()
        assert station.tick(5.0, holding=True) is False
        assert station.progress == 0.0

    def test_hold_to_complete(self):
        station, tracker, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        assert station.tick(1.5, holding=True) is False
        assert station.repairing
        assert station.tick(1.5, holding=True) is True
        assert station.repaired
        assert not tracker.has_unresolved(IssueKind.HULL_BREACH)

    def test_completion_resolves_only_once(self):
        station, tracker, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(3.0, holding=True)
        assert station.tick(3.0, holding=True) is False
        assert tracker.resolved_count == 1

    def test_release_loses_progress(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(2.0, holding=True)
        station.tick(0.1, holding=False)
        assert station.progress == 0.0
        assert not station.repairing

    def test_hold_and_release_state(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.hold()
        station.tick(2.0)
        assert station.progress == pytest.approx(2.0)
        station.release()
        station.tick(0.1)
        assert station.progress == 0.0

    def test_player_exit_loses_progress(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(2.0, holding=True)
        station.player_exit()
        assert station.progress == 0.0
        assert station.tick(1.0, holding=True) is False

    def test_damage_interrupts(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(2.5, holding=True)
        station.interrupt(damage=12.0)
        assert station.progress == 0.0
        assert station.tick(1.0, holding=True) is False
        assert station.progress == pytest.approx(1.0)

    def test_already_resolved_issue_blocks_station(self):
        station, tracker, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        tracker.resolve(IssueKind.HULL_BREACH)
        station.player_enter()
        assert not station.usable
        assert station.tick(5.0, holding=True) is False

    def test_phase_change_mid_repair_cancels(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(1.5, holding=True)
        assert station.repairing
        pc.trigger_defeat()
        assert station.tick(0.1, holding=True) is False
        assert not station.repairing
        assert station.progress == 0.0
        assert station.debug_info() == "hull_breach: Hold to repair"
        assert station.get_state()["repairing"] is False

    def test_landing_resets_station(self):
        station, _, pc = _make_station()
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(3.0, holding=True)
        pc.trigger_victory()
        pc.transition_to(RunPhase.LANDING)
        assert not station.repaired
        assert station.progress == 0.0

    def test_debug_info(self):
        station, _, pc = _make_station()
        assert station.debug_info() == "hull_breach: NEEDS REPAIR"
        pc.transition_to(RunPhase.FINAL_STAND)
        station.player_enter()
        station.tick(3.0, holding=True)
        assert station.debug_info() == "hull_breach: REPAIRED"
