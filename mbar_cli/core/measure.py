"""Time-boxed measurement of unclassified images."""

from __future__ import annotations

import logging
import math
import time
from decimal import Decimal
from typing import Any, Callable, Optional

from mbar_cli.core.constants import DEFAULT_TIME_LIMIT, TIME_LIMIT_MARGIN
from mbar_cli.core.models import BatchResult, BatchStatus
from mbar_cli.core.ratios import ratio_of
from mbar_cli.core.store import MediaStore, StorageUnavailable

logger = logging.getLogger("mbar.measure")

ItemCallback = Callable[[int, Decimal], None]


def parse_time_limit(value: Any, default: int = DEFAULT_TIME_LIMIT) -> int:
    """Floor a numeric time limit in seconds; anything else becomes the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (TypeError, ValueError, OverflowError):
        logger.debug("Ignoring non-numeric time limit %r", value)
        return default
    if not math.isfinite(number) or number < 0:
        logger.debug("Ignoring out-of-range time limit %r", value)
        return default
    return int(math.floor(number))


def measure_ratio(width: Optional[int], height: Optional[int]) -> Decimal:
    """Rounded width/height, or the 0 sentinel when dimensions are unknown."""
    if not width or not height or width <= 0 or height <= 0:
        return Decimal(0)
    return ratio_of(width, height)


class BatchClassifier:
    """Measure unclassified images until the list drains or time runs out.

    The elapsed-time check happens after each item, so a single slow read or
    write can push a run past its budget. Nothing is kept in memory between
    runs: an item counts as done once its ratio is stored.
    """

    def __init__(
        self,
        store: MediaStore,
        clock: Callable[[], float] = time.monotonic,
        margin: int = TIME_LIMIT_MARGIN,
    ) -> None:
        self.store = store
        self.clock = clock
        self.margin = margin

    def measure_item(self, item_id: int) -> Decimal:
        width, height = self.store.get_dimensions(item_id)
        ratio = measure_ratio(width, height)
        self.store.set_ratio(item_id, ratio)
        return ratio

    def run(
        self,
        time_limit: Any = DEFAULT_TIME_LIMIT,
        default_if_missing: int = DEFAULT_TIME_LIMIT,
        on_item: Optional[ItemCallback] = None,
    ) -> BatchResult:
        limit = parse_time_limit(time_limit, default=default_if_missing)
        bounded = limit > 0
        budget = limit - self.margin

        try:
            item_ids = list(self.store.unmeasured_image_ids())
        except StorageUnavailable:
            raise
        except Exception as exc:
            raise StorageUnavailable(f"Unable to list unmeasured images: {exc}") from exc

        total = len(item_ids)
        if total == 0:
            logger.info("No unmeasured images found")
            return BatchResult(status=BatchStatus.EMPTY, processed=0, total=0)

        logger.debug("Measuring %d images (time limit %ss)", total, limit if bounded else "unbounded")
        start = self.clock()
        processed = 0

        for index, item_id in enumerate(item_ids):
            try:
                ratio = self.measure_item(item_id)
            except StorageUnavailable:
                raise
            except Exception as exc:
                raise StorageUnavailable(f"Unable to measure attachment {item_id}: {exc}") from exc

            processed += 1
            logger.debug("Attachment %s measured at %s", item_id, ratio)
            if on_item is not None:
                on_item(item_id, ratio)

            if bounded and (self.clock() - start) > budget:
                status = BatchStatus.COMPLETE if index == total - 1 else BatchStatus.PARTIAL
                logger.info("Time limit reached after %d of %d images", processed, total)
                return BatchResult(status=status, processed=processed, total=total)

        return BatchResult(status=BatchStatus.COMPLETE, processed=processed, total=total)
