from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Row(BaseModel):
    """
    A single consumable line item.
    The (inventory_at_update, updated_at_ms) pair is a past-accurate snapshot;
    the live quantity is always derived from it, never stored.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    consumption_per_hour: Optional[float] = Field(default=None, alias="consumptionPerHour")
    inventory_at_update: Optional[float] = Field(default=None, alias="inventoryAtUpdate")
    updated_at_ms: Optional[int] = Field(default=None, alias="updatedAtMs")


class ProfileConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    desired_hours: Optional[float] = Field(default=None, alias="desiredHours")


class Profile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    rows: list[Row] = Field(default_factory=list)
    config: ProfileConfig = Field(default_factory=ProfileConfig)


class AppState(BaseModel):
    """Everything that gets persisted and shared: the profiles plus the current selection."""

    model_config = ConfigDict(populate_by_name=True)

    selected_profile_id: Optional[str] = Field(default=None, alias="selectedProfileId")
    profiles: list[Profile]


class RowInput(BaseModel):
    """
    Defines the contract for user-entered values before they reach the projection engine.
    The engine itself does no validation, so non-finite or negative numbers stop here.
    """

    name: str = Field(..., min_length=1)
    consumption_per_hour: float = Field(..., ge=0, allow_inf_nan=False)
    inventory: float = Field(..., ge=0, allow_inf_nan=False)


class StatusItem(BaseModel):
    """One line of the status report. Aliases double as CSV column headers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="ID")
    name: str = Field(..., alias="Name")
    consumption_per_hour: float = Field(default=0, alias="Consumption/h")
    inventory: Optional[int] = Field(default=0, ge=0, alias="Inventory")
    updated_at: str = Field(..., alias="Updated At")
    duration: str = Field(..., alias="Duration")
    hours_left: Optional[float] = Field(default=None, ge=0, alias="Hours Left")


class ShortfallItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name")
    inventory: Optional[int] = Field(default=0, ge=0, alias="Inventory")
    shortfall: float = Field(default=0, ge=0, alias="Shortfall")
