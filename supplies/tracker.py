import logging
import math
from pathlib import Path
from typing import Annotated, Callable, Optional

from pydantic import Field, TypeAdapter, ValidationError

from . import projection, share, storage
from .schemas import AppState, Profile, Row, RowInput, ShortfallItem, StatusItem
from .utils import format_datetime, generate_id, now_ms

logger = logging.getLogger(__name__)

# Rates, counts and hours typed by a user must be finite and non-negative.
_QUANTITY = TypeAdapter(Annotated[float, Field(ge=0, allow_inf_nan=False)])


def parse_quantity(value) -> float:
    """Validates a user-entered number. Raises pydantic's ValidationError on bad input."""
    return _QUANTITY.validate_python(value)


def _whole_units(quantity: float) -> Optional[int]:
    # NaN or infinite stock has no whole-unit count to show.
    return math.floor(quantity) if math.isfinite(quantity) else None


def status_item(row: Row, now: int) -> StatusItem:
    current = projection.compute_current_inventory(row, now)
    rate = row.consumption_per_hour or 0
    hours_left = projection.hours_until_depleted(rate, current)
    if hours_left is not None and math.isnan(hours_left):
        hours_left = None
    return StatusItem(
        id=row.id,
        name=row.name,
        consumption_per_hour=rate,
        inventory=_whole_units(current),
        updated_at=format_datetime(row.updated_at_ms or now),
        duration=projection.compute_duration_string(rate, current),
        hours_left=hours_left,
    )


def shortfall_item(row: Row, hours: float, now: int) -> ShortfallItem:
    return ShortfallItem(
        name=row.name,
        inventory=_whole_units(projection.compute_current_inventory(row, now)),
        shortfall=round(projection.compute_shortfall(row, hours, now), 2),
    )


class SupplyTracker:
    """
    Owns the saved profiles and applies user actions to them.
    Every mutation is followed by a save, and every projection uses the injected clock.
    """

    def __init__(self, state_path: Optional[Path] = None, clock: Callable[[], int] = now_ms):
        self.state_path = state_path
        self.clock = clock
        self.state: AppState = storage.load_state(state_path)
        if not self.state.profiles:
            self.state = storage.get_default_state()

    @property
    def profile(self) -> Profile:
        return storage.get_selected_profile(self.state)

    def save(self) -> None:
        storage.save_state(self.state, self.state_path)

    def get_row(self, row_id: str) -> Row:
        for row in self.profile.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"Unknown row id: {row_id}")

    # --- Rows ---

    def add_row(self, name: str, consumption_per_hour, inventory) -> Row:
        data = RowInput(
            name=str(name or "").strip(),
            consumption_per_hour=consumption_per_hour,
            inventory=inventory,
        )
        row = Row(
            id=generate_id("row"),
            name=data.name,
            consumption_per_hour=data.consumption_per_hour,
            inventory_at_update=data.inventory,
            updated_at_ms=self.clock(),
        )
        storage.upsert_row(self.profile, row)
        self.save()
        logger.info(f"✅ Added '{row.name}' to profile '{self.profile.name}'.")
        return row

    def rename_row(self, row_id: str, name: str) -> Row:
        row = self.get_row(row_id).model_copy(update={"name": str(name)})
        storage.upsert_row(self.profile, row)
        self.save()
        return row

    def change_rate(self, row_id: str, consumption_per_hour) -> Row:
        rate = parse_quantity(consumption_per_hour)
        row = projection.apply_rate_change(self.get_row(row_id), rate, self.clock())
        storage.upsert_row(self.profile, row)
        self.save()
        logger.info(
            f"Rate for '{row.name}' set to {rate}/h "
            f"(snapshot reconciled at {row.inventory_at_update:.2f})."
        )
        return row

    def update_inventory(self, row_id: str, inventory) -> Row:
        value = parse_quantity(inventory)
        row = projection.apply_inventory_correction(self.get_row(row_id), value, self.clock())
        storage.upsert_row(self.profile, row)
        self.save()
        logger.info(f"Inventory for '{row.name}' corrected to {value}.")
        return row

    def remove_row(self, row_id: str) -> None:
        row = self.get_row(row_id)
        storage.delete_row(self.profile, row_id)
        self.save()
        logger.info(f"🗑️ Removed '{row.name}'.")

    # --- Projections ---

    def row_views(self, now: Optional[int] = None) -> list[StatusItem]:
        now = self.clock() if now is None else now
        return [status_item(row, now) for row in self.profile.rows]

    def shortfall(self, hours=None, now: Optional[int] = None) -> list[ShortfallItem]:
        """Missing quantity per row to last `hours` (defaults to the profile's desired hours)."""
        if hours is None:
            hours = self.profile.config.desired_hours
        if hours is None:
            raise ValueError("No desired hours given or configured for this profile")
        hours = parse_quantity(hours)
        if hours <= 0:
            raise ValueError("Desired hours must be greater than zero")

        now = self.clock() if now is None else now
        return [shortfall_item(row, hours, now) for row in self.profile.rows]

    def set_desired_hours(self, hours) -> None:
        storage.set_desired_hours(self.profile, parse_quantity(hours))
        self.save()

    # --- Profiles ---

    def create_profile(self, name: Optional[str] = None) -> Profile:
        profile = storage.create_profile(self.state, name)
        self.save()
        logger.info(f"✅ Created profile '{profile.name}'.")
        return profile

    def select_profile(self, profile_id: str) -> Profile:
        if not any(p.id == profile_id for p in self.state.profiles):
            raise KeyError(f"Unknown profile id: {profile_id}")
        storage.set_selected_profile(self.state, profile_id)
        self.save()
        return self.profile

    def delete_profile(self, profile_id: Optional[str] = None) -> None:
        profile_id = profile_id or self.profile.id
        if not any(p.id == profile_id for p in self.state.profiles):
            raise KeyError(f"Unknown profile id: {profile_id}")
        storage.delete_profile(self.state, profile_id)
        self.save()

    # --- Sharing ---

    def export_url(self, base_url: Optional[str] = None) -> str:
        return share.build_export_url(self.state, base_url)

    def import_data(self, source: str) -> AppState:
        """Replaces all profiles with the shared payload. Raises ValueError if it can't be decoded."""
        try:
            imported = share.decode_state(source)
        except ValidationError as e:
            logger.error("❌ Shared data does not match the profile schema.")
            raise ValueError(str(e)) from e

        if not imported.profiles:
            logger.warning("⚠️ Shared data has no profiles. Resetting to defaults.")
            imported = storage.get_default_state()
        self.state = imported
        self.save()
        logger.info(f"✅ Imported {len(imported.profiles)} profile(s).")
        return imported
