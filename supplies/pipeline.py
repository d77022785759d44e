import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional
import pandas as pd

from . import data_handler
from .tracker import SupplyTracker

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for report pipelines (Status, Shortfall).
    Follows an Extract -> Transform -> Load (ETL) pattern over the selected profile.
    """

    def __init__(self, report_type: str, tracker: SupplyTracker, test_mode: bool = False):
        self.report_type = report_type
        self.tracker = tracker
        self.test_mode = test_mode
        # One clock reading per run keeps every row projected to the same instant.
        self.now = tracker.clock()
        self.metadata: dict[str, Any] = {
            "profile": tracker.profile.name,
            "profileId": tracker.profile.id,
            "generatedAt": datetime.fromtimestamp(self.now / 1000).isoformat(timespec="seconds"),
        }
        self.output_path: Optional[str] = None

    def run(self) -> list[Any] | None:
        """
        Orchestrates the pipeline execution.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None or raw_data.empty:
            logger.warning(f"⚠️ Profile '{self.metadata['profile']}' has no rows. Sending empty report.")
            self.load([])
            return []

        # --- 2. TRANSFORM ---
        validated_data = self.transform(raw_data)
        if validated_data is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(validated_data)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    def extract(self) -> pd.DataFrame | None:
        """Snapshot rows of the selected profile, one record per row."""
        rows = self.tracker.profile.rows
        logger.info(f"Found {len(rows)} rows in profile '{self.metadata['profile']}'.")
        # object dtype keeps None and NaN apart; numeric inference would merge them.
        return pd.DataFrame([row.model_dump() for row in rows], dtype=object)

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> list[Any] | None:
        """
        Projects every snapshot to `self.now` and validates the report rows.
        Returns a list of Pydantic models.
        """
        pass

    def load(self, validated_data: list[Any]):
        """
        Saves data to disk and posts to webhook.
        """
        logger.info("\n--- Report Metadata ---")
        for key, value in self.metadata.items():
            logger.info(f"{key}: {value}")

        if validated_data:
            self.output_path = data_handler.save_outputs(validated_data, f"{self.report_type}_report")
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata=self.metadata,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")


def records_from_frame(df: pd.DataFrame) -> list[dict]:
    """DataFrame rows as plain dicts, values untouched."""
    return df.to_dict("records")
