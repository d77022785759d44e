import logging
import pandas as pd
from pydantic import ValidationError

from supplies.pipeline import DataPipeline, records_from_frame
from supplies.schemas import Row, ShortfallItem
from supplies.tracker import SupplyTracker, parse_quantity, shortfall_item

logger = logging.getLogger(__name__)


class ShortfallPipeline(DataPipeline):
    """How much of each row is missing to stay supplied for `hours`."""

    def __init__(self, tracker: SupplyTracker, hours: float, test_mode: bool = False):
        super().__init__("shortfall", tracker, test_mode=test_mode)
        if hours is None:
            raise ValueError("No desired hours given or configured for this profile")
        hours = parse_quantity(hours)
        if hours <= 0:
            raise ValueError("Desired hours must be greater than zero")
        self.hours = hours
        self.metadata["desiredHours"] = hours

    def transform(self, df: pd.DataFrame) -> list[ShortfallItem] | None:
        logger.info(f"\n--- Computing Shortfall for {self.hours}h ---")

        try:
            validated_data = [
                shortfall_item(Row.model_validate(rec), self.hours, self.now)
                for rec in records_from_frame(df)
            ]
            logger.info("✅ Data validation successful.")
        except (ValidationError, ValueError) as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        missing = [item for item in validated_data if item.shortfall > 0]
        logger.info(f"{len(missing)} of {len(validated_data)} row(s) need restocking.")
        return validated_data
