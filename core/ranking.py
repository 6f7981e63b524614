"""Turn a run's detections into the externally visible result."""
from typing import Dict, Iterable, Union
import logging

from models.detection import DetectionRecord, DetectionResult

logger = logging.getLogger(__name__)

# Detections below this aggregate confidence are not reported
CONFIDENCE_FLOOR = 50
# Reserved fingerprint-database category for content management systems
CMS_CATEGORY_ID = 1


def finalize(
    records: Union[Dict[str, DetectionRecord], Iterable[DetectionRecord]],
    confidence_floor: int = CONFIDENCE_FLOOR,
    cms_category_id: int = CMS_CATEGORY_ID,
) -> DetectionResult:
    """
    Filter by the confidence floor, rank, and pick the headline CMS.

    Sorting is stable, so records with equal confidence keep the order in
    which they were first detected.
    """
    if isinstance(records, dict):
        records = records.values()

    ranked = sorted(
        (r for r in records if r.confidence >= confidence_floor),
        key=lambda r: r.confidence,
        reverse=True,
    )
    cms = next((r for r in ranked if r.has_category(cms_category_id)), None)

    logger.info(f"Detected {len(ranked)} technologies" + (f", CMS: {cms.name}" if cms else ""))
    return DetectionResult(
        cms=cms.name if cms else None,
        cms_details=cms,
        detected_technologies=ranked,
    )
