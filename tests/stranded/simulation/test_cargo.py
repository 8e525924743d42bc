"""Unit tests for SharedCargo and DeploymentPoints."""

from __future__ import annotations

import pytest

from stranded.simulation.cargo import ItemKind, SharedCargo
from stranded.simulation.deployment import DeploymentPoints
from stranded.simulation.phases import PhaseController, RunPhase

pytestmark = pytest.mark.unit


# --------------------------------------------------------------------------
# SharedCargo
# --------------------------------------------------------------------------

class TestSharedCargo:
    def test_starts_empty(self):
        cargo = SharedCargo(slots=4)
        assert cargo.count == 0
        assert cargo.free_slots == 4
        assert cargo.fill_fraction == 0.0

    def test_add_and_count(self):
        cargo = SharedCargo(slots=4)
        assert cargo.try_add(ItemKind.POWER_CORE)
        assert cargo.try_add(ItemKind.POWER_CORE)
        assert cargo.try_add(ItemKind.FUEL_GEL)
        assert cargo.count_of(ItemKind.POWER_CORE) == 2
        assert cargo.count_of(ItemKind.FUEL_GEL) == 1
        assert cargo.count_of(ItemKind.SCRAP_METAL) == 0
        assert cargo.contains(ItemKind.FUEL_GEL)

    def test_full_rejects_and_notifies(self):
        cargo = SharedCargo(slots=1)
        full_calls = []
        cargo.on_full(lambda: full_calls.append(True))
        cargo.try_add(ItemKind.SCRAP_METAL)
        assert cargo.is_full
        assert cargo.try_add(ItemKind.POWER_CORE) is False
        assert full_calls == [True]

    def test_none_rejected(self, log_records):
        cargo = SharedCargo(slots=2)
        assert cargo.try_add(ItemKind.NONE) is False
        assert cargo.remove(ItemKind.NONE) is False
        assert cargo.count == 0

    def test_remove_frees_slot(self):
        cargo = SharedCargo(slots=2)
        removed = []
        cargo.on_item_removed(removed.append)
        cargo.try_add(ItemKind.ALIEN_TECH)
        assert cargo.remove(ItemKind.ALIEN_TECH)
        assert cargo.count == 0
        assert removed == [ItemKind.ALIEN_TECH]
        assert cargo.remove(ItemKind.ALIEN_TECH) is False

    def test_added_listener(self):
        cargo = SharedCargo(slots=2)
        added = []
        cargo.on_item_added(added.append)
        cargo.try_add(ItemKind.FUEL_GEL)
        assert added == [ItemKind.FUEL_GEL]

    def test_failing_listener_does_not_block_add(self, log_records):
        cargo = SharedCargo(slots=2)
        cargo.on_item_added(lambda kind: 1 / 0)
        assert cargo.try_add(ItemKind.FUEL_GEL)
        assert cargo.count == 1
        assert any(level == "ERROR" for level, _ in log_records)

    def test_landing_clears(self):
        pc = PhaseController()
        cargo = SharedCargo(pc, slots=3)
        cleared = []
        cargo.on_cleared(lambda: cleared.append(True))
        pc.transition_to(RunPhase.EXPEDITION)
        cargo.try_add(ItemKind.POWER_CORE)
        pc.trigger_defeat()
        pc.transition_to(RunPhase.LANDING)
        assert cargo.count == 0
        assert cleared == [True]

    def test_get_state(self):
        cargo = SharedCargo(slots=2)
        cargo.try_add(ItemKind.POWER_CORE)
        assert cargo.get_state() == {
            "slots": ["power_core", "none"],
            "count": 1,
            "max_slots": 2,
        }


# --------------------------------------------------------------------------
# DeploymentPoints
# --------------------------------------------------------------------------

class TestDeploymentPoints:
    def test_add_and_spend(self):
        dp = DeploymentPoints(points_per_salvage=10)
        changes = []
        dp.on_changed(lambda old, new: changes.append((old, new)))
        assert dp.add(30)
        assert dp.spend(20)
        assert dp.points == 10
        assert changes == [(0, 30), (30, 10)]

    def test_spend_insufficient(self):
        dp = DeploymentPoints()
        dp.add(5)
        assert dp.spend(6) is False
        assert dp.points == 5
        assert dp.has_enough(5)
        assert not dp.has_enough(6)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amounts_rejected(self, amount, log_records):
        dp = DeploymentPoints()
        dp.add(10)
        assert dp.add(amount) is False
        assert dp.spend(amount) is False
        assert dp.points == 10
        assert sum(1 for level, _ in log_records if level == "WARNING") == 2

    def test_reset(self):
        dp = DeploymentPoints()
        dp.add(40)
        dp.reset()
        assert dp.points == 0

    def test_convert_salvage(self):
        cargo = SharedCargo(slots=6)
        for kind in (ItemKind.SCRAP_METAL, ItemKind.ALIEN_TECH,
                     ItemKind.POWER_CORE, ItemKind.SCRAP_METAL):
            cargo.try_add(kind)
        dp = DeploymentPoints(points_per_salvage=10)

        gained = dp.convert_salvage(cargo)

        assert gained == 30
        assert dp.points == 30
        assert cargo.items() == [ItemKind.POWER_CORE]

    def test_convert_salvage_logs_no_warnings(self, log_records):
        cargo = SharedCargo(slots=3)
        cargo.try_add(ItemKind.SCRAP_METAL)
        dp = DeploymentPoints(points_per_salvage=10)
        assert dp.convert_salvage(cargo) == 10
        assert not [m for level, m in log_records if level == "WARNING"]

    def test_convert_without_salvage(self):
        cargo = SharedCargo(slots=2)
        cargo.try_add(ItemKind.FUEL_GEL)
        dp = DeploymentPoints()
        assert dp.convert_salvage(cargo) == 0
        assert dp.points == 0

    def test_convert_without_cargo_logs_error(self, log_records):
        dp = DeploymentPoints()
        assert dp.convert_salvage(None) == 0
        assert any(level == "ERROR" for level, _ in log_records)
