import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from . import settings
from .schemas import AppState, Profile, ProfileConfig, Row
from .utils import generate_id

logger = logging.getLogger(__name__)


def get_default_state() -> AppState:
    default_profile_id = generate_id("profile")
    return AppState(
        selected_profile_id=default_profile_id,
        profiles=[Profile(id=default_profile_id, name=settings.DEFAULT_PROFILE_NAME)],
    )


def load_state(path: Optional[Path] = None) -> AppState:
    """
    Loads the saved profiles. Anything unusable (missing file, bad JSON,
    wrong shape) falls back to a fresh default state.
    """
    path = Path(path) if path is not None else settings.STATE_FILE
    if not path.exists():
        logger.info(f"No saved state at {path}. Starting with a default profile.")
        return get_default_state()

    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"⚠️ Could not read state from {path.name}: {e}. Using defaults.")
        return get_default_state()

    if not isinstance(parsed, dict) or not isinstance(parsed.get("profiles"), list):
        logger.warning(f"⚠️ State file {path.name} has no profile list. Using defaults.")
        return get_default_state()

    try:
        return AppState.model_validate(parsed)
    except ValidationError as e:
        logger.warning(f"⚠️ State file {path.name} failed validation. Using defaults.")
        logger.debug(e)
        return get_default_state()


def save_state(state: AppState, path: Optional[Path] = None) -> None:
    path = Path(path) if path is not None else settings.STATE_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = state.model_dump_json(by_alias=True, exclude_none=True, indent=2)
        path.write_text(raw, encoding="utf-8")
    except OSError as e:
        logger.error(f"❌ Could not save state to {path}: {e}")


def get_selected_profile(state: AppState) -> Optional[Profile]:
    for profile in state.profiles:
        if profile.id == state.selected_profile_id:
            return profile
    return state.profiles[0] if state.profiles else None


def set_selected_profile(state: AppState, profile_id: str) -> None:
    state.selected_profile_id = profile_id


def create_profile(state: AppState, name: Optional[str] = None) -> Profile:
    profile = Profile(
        id=generate_id("profile"),
        name=name or settings.NEW_PROFILE_NAME,
        config=ProfileConfig(),
    )
    state.profiles.append(profile)
    state.selected_profile_id = profile.id
    return profile


def delete_profile(state: AppState, profile_id: str) -> None:
    """Removes a profile. The last profile is replaced by a default one, never left empty."""
    idx = next((i for i, p in enumerate(state.profiles) if p.id == profile_id), None)
    if idx is None:
        return

    del state.profiles[idx]
    if not state.profiles:
        default = get_default_state()
        state.profiles = default.profiles
        state.selected_profile_id = default.selected_profile_id
    elif not any(p.id == state.selected_profile_id for p in state.profiles):
        state.selected_profile_id = state.profiles[0].id


def upsert_row(profile: Profile, row: Row) -> None:
    for i, existing in enumerate(profile.rows):
        if existing.id == row.id:
            # Whole-record swap: readers see either the old snapshot or the new one.
            profile.rows[i] = row
            return
    profile.rows.append(row)


def delete_row(profile: Profile, row_id: str) -> None:
    profile.rows = [r for r in profile.rows if r.id != row_id]


def set_desired_hours(profile: Profile, hours: float) -> None:
    profile.config.desired_hours = hours
