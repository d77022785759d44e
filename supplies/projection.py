"""
Depletion model for consumable rows.

A row stores a snapshot (inventory_at_update, updated_at_ms) and a constant
consumption rate. The live quantity is projected from that snapshot:

    max(0, inventory_at_update - consumption_per_hour * elapsed_ms / 3_600_000)

Nothing here raises or validates: absent values default to zero and NaN
propagates to the caller.
"""

import math
from typing import Optional

from .schemas import Row
from .utils import now_ms

MS_PER_HOUR = 3_600_000
MINUTES_PER_DAY = 24 * 60
INFINITE_DURATION = "∞"
UNKNOWN_DURATION = "?"


def compute_current_inventory(row: Row, now: Optional[int] = None) -> float:
    """Projected inventory at `now`. Never negative; a clock running backwards applies no decay."""
    if now is None:
        now = now_ms()
    # A row without a timestamp has no elapsed time to decay over.
    updated_at = row.updated_at_ms or now
    elapsed_hours = max(0, now - updated_at) / MS_PER_HOUR
    consumed = (row.consumption_per_hour or 0) * elapsed_hours
    current = (row.inventory_at_update or 0) - consumed
    return 0.0 if current < 0 else current


def compute_duration_string(consumption_per_hour: Optional[float], inventory: float) -> str:
    """
    Time left until `inventory` runs out, as '{days}d{hours}h{minutes}m'.
    Components are floored from the total minute count, never rounded on their own.
    """
    if not consumption_per_hour or consumption_per_hour <= 0:
        return INFINITE_DURATION

    raw_minutes = (inventory / consumption_per_hour) * 60
    if math.isnan(raw_minutes):
        return UNKNOWN_DURATION
    if math.isinf(raw_minutes):
        return INFINITE_DURATION

    total_minutes = math.floor(raw_minutes)
    days = total_minutes // MINUTES_PER_DAY
    hours = (total_minutes % MINUTES_PER_DAY) // 60
    minutes = total_minutes % 60
    return f"{days}d{hours}h{minutes}m"


def reset_row_timestamp_with_current_inventory(row: Row, now: Optional[int] = None) -> None:
    """Collapse the projection into a fresh snapshot, in place."""
    if now is None:
        now = now_ms()
    row.inventory_at_update = compute_current_inventory(row, now)
    row.updated_at_ms = now


def reconcile_row(row: Row, now: Optional[int] = None) -> Row:
    """Same as reset_row_timestamp_with_current_inventory, but returns a new row."""
    if now is None:
        now = now_ms()
    return row.model_copy(
        update={
            "inventory_at_update": compute_current_inventory(row, now),
            "updated_at_ms": now,
        }
    )


def apply_rate_change(row: Row, consumption_per_hour: float, now: Optional[int] = None) -> Row:
    # Decay incurred under the old rate is booked before the new rate takes over.
    reconciled = reconcile_row(row, now)
    return reconciled.model_copy(update={"consumption_per_hour": consumption_per_hour})


def apply_inventory_correction(row: Row, inventory: float, now: Optional[int] = None) -> Row:
    """A manual count replaces the snapshot outright; projected decay is discarded."""
    if now is None:
        now = now_ms()
    return row.model_copy(update={"inventory_at_update": inventory, "updated_at_ms": now})


def hours_until_depleted(consumption_per_hour: Optional[float], inventory: float) -> Optional[float]:
    if not consumption_per_hour or consumption_per_hour <= 0:
        return None
    return inventory / consumption_per_hour


def compute_shortfall(row: Row, desired_hours: float, now: Optional[int] = None) -> float:
    """Units missing to keep the row supplied for `desired_hours` from now."""
    needed = (row.consumption_per_hour or 0) * desired_hours
    return max(0.0, needed - compute_current_inventory(row, now))
