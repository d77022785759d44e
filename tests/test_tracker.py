import pytest
from pydantic import ValidationError

from supplies import storage
from supplies.tracker import SupplyTracker, parse_quantity

from conftest import HOUR, T0


def test_add_row_snapshots_at_creation(tracker, state_path):
    row = tracker.add_row("  Water  ", "10", 240)
    assert row.name == "Water"
    assert row.consumption_per_hour == 10
    assert row.inventory_at_update == 240
    assert row.updated_at_ms == T0

    reloaded = storage.load_state(state_path)
    assert storage.get_selected_profile(reloaded).rows == [row]


@pytest.mark.parametrize(
    "name, rate, inventory",
    [("", 1, 1), ("x", "abc", 1), ("x", 1, float("nan")), ("x", -1, 5), ("x", 1, float("inf"))],
)
def test_add_row_rejects_bad_input(tracker, name, rate, inventory):
    with pytest.raises(ValidationError):
        tracker.add_row(name, rate, inventory)
    assert tracker.profile.rows == []


def test_change_rate_reconciles_first(tracker, clock):
    row = tracker.add_row("Rations", 5, 100)
    clock.advance(2 * HOUR)
    changed = tracker.change_rate(row.id, 20)
    assert changed.inventory_at_update == 90
    assert changed.updated_at_ms == T0 + 2 * HOUR
    assert changed.consumption_per_hour == 20

    clock.advance(HOUR)
    assert tracker.row_views()[0].inventory == 70


def test_change_rate_rejects_negative_and_keeps_row(tracker, clock):
    row = tracker.add_row("Rations", 5, 100)
    clock.advance(HOUR)
    with pytest.raises(ValidationError):
        tracker.change_rate(row.id, -3)
    assert tracker.get_row(row.id) == row


def test_update_inventory_overwrites_snapshot(tracker, clock):
    row = tracker.add_row("Ammo", 10, 240)
    clock.advance(5 * HOUR)
    corrected = tracker.update_inventory(row.id, "300")
    assert corrected.inventory_at_update == 300
    assert corrected.updated_at_ms == T0 + 5 * HOUR
    assert tracker.row_views()[0].duration == "1d6h0m"


def test_rename_and_remove(tracker):
    row = tracker.add_row("Med kits", 0, 3)
    tracker.rename_row(row.id, "Medkits")
    assert tracker.get_row(row.id).name == "Medkits"
    tracker.remove_row(row.id)
    assert tracker.profile.rows == []
    with pytest.raises(KeyError):
        tracker.remove_row(row.id)


def test_row_views(tracker, clock):
    tracker.add_row("Water", 10, 240)
    tracker.add_row("Spare parts", 0, 7.9)
    clock.advance(HOUR)

    water, parts = tracker.row_views()
    assert (water.inventory, water.duration, water.hours_left) == (230, "0d23h0m", 23)
    assert (parts.inventory, parts.duration, parts.hours_left) == (7, "∞", None)


def test_shortfall_uses_desired_hours(tracker, clock):
    tracker.add_row("Water", 10, 100)
    tracker.add_row("Fuel", 1, 500)
    with pytest.raises(ValueError):
        tracker.shortfall()

    tracker.set_desired_hours(24)
    clock.advance(2 * HOUR)
    water, fuel = tracker.shortfall()
    assert (water.name, water.inventory, water.shortfall) == ("Water", 80, 160)
    assert fuel.shortfall == 0

    assert tracker.shortfall(10)[0].shortfall == 20
    with pytest.raises(ValueError):
        tracker.shortfall(0)


def test_profiles(tracker, state_path):
    first = tracker.profile
    depot = tracker.create_profile("Depot")
    assert tracker.profile.id == depot.id
    tracker.add_row("Water", 1, 10)

    tracker.select_profile(first.id)
    assert tracker.profile.rows == []
    with pytest.raises(KeyError):
        tracker.select_profile("missing")

    tracker.delete_profile()
    assert tracker.profile.id == depot.id
    assert SupplyTracker(state_path=state_path).profile.id == depot.id


def test_export_import_between_trackers(tracker, tmp_path, clock):
    tracker.add_row("Water", 10, 240)
    tracker.create_profile("Depot")
    url = tracker.export_url("https://example.org/")

    other = SupplyTracker(state_path=tmp_path / "other.json", clock=clock)
    other.import_data(url)
    assert other.state == tracker.state
    assert other.profile.name == "Depot"


def test_import_failure_keeps_current_state(tracker):
    tracker.add_row("Water", 10, 240)
    before = tracker.state.model_copy(deep=True)
    with pytest.raises(ValueError):
        tracker.import_data("garbage!!")
    assert tracker.state == before


def test_import_without_profiles_resets_to_default(tracker):
    from supplies.utils import base64_encode_json

    tracker.import_data(base64_encode_json({"selectedProfileId": None, "profiles": []}))
    assert len(tracker.state.profiles) == 1
    assert tracker.profile.rows == []


def test_parse_quantity():
    assert parse_quantity("2.5") == 2.5
    for bad in ("x", -0.1, float("nan"), float("inf")):
        with pytest.raises(ValidationError):
            parse_quantity(bad)


def _write_stored_rows(state_path, inventories):
    rows = ",".join(
        f'{{"id": "{row_id}", "name": "{row_id}", "consumptionPerHour": 2, '
        f'"inventoryAtUpdate": {value}, "updatedAtMs": {T0}}}'
        for row_id, value in inventories
    )
    state_path.write_text(
        f'{{"selectedProfileId": "p", "profiles": [{{"id": "p", "name": "P", "rows": [{rows}]}}]}}',
        encoding="utf-8",
    )


def test_non_finite_stored_inventory_renders_without_crashing(state_path, clock):
    _write_stored_rows(state_path, [("broken", "NaN"), ("endless", "1e999")])
    tracker = SupplyTracker(state_path=state_path, clock=clock)
    clock.advance(HOUR)

    broken, endless = tracker.row_views()
    assert (broken.inventory, broken.duration, broken.hours_left) == (None, "?", None)
    assert (endless.inventory, endless.duration) == (None, "∞")
    assert endless.hours_left == float("inf")

    for item in tracker.shortfall(10):
        assert item.inventory is None
        assert item.shortfall == 0
