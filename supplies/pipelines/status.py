import logging
import pandas as pd
from pydantic import ValidationError

from supplies.pipeline import DataPipeline, records_from_frame
from supplies.schemas import Row, StatusItem
from supplies.tracker import SupplyTracker, status_item

logger = logging.getLogger(__name__)


class StatusPipeline(DataPipeline):
    def __init__(self, tracker: SupplyTracker, test_mode: bool = False):
        super().__init__("status", tracker, test_mode=test_mode)

    def transform(self, df: pd.DataFrame) -> list[StatusItem] | None:
        logger.info("\n--- Projecting Inventory ---")

        try:
            validated_data = [
                status_item(Row.model_validate(rec), self.now)
                for rec in records_from_frame(df)
            ]
            logger.info("✅ Data validation successful.")
        except (ValidationError, ValueError) as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        # Soonest to run out first; rows that never deplete go last.
        validated_data.sort(
            key=lambda item: (item.hours_left is None, item.hours_left or 0, item.name)
        )

        depleted = sum(1 for item in validated_data if item.hours_left == 0)
        if depleted:
            logger.warning(f"⚠️ {depleted} row(s) already depleted.")
        return validated_data
