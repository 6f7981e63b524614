"""Tests for the confidence floor, ordering and CMS selection."""
from core.ranking import finalize, CONFIDENCE_FLOOR
from models.detection import DetectionRecord
from models.technology import Category

CMS = Category(id=1, name="CMS")
JS_LIB = Category(id=59, name="JavaScript libraries")


def record(name, confidence, *cats):
    return DetectionRecord(name=name, confidence=confidence, categories=list(cats))


def test_floor_excludes_low_confidence():
    result = finalize([record("A", 49), record("B", 50), record("C", 100)])
    names = [r.name for r in result.detected_technologies]
    assert names == ["C", "B"]
    assert all(r.confidence >= CONFIDENCE_FLOOR for r in result.detected_technologies)


def test_lowering_the_floor_never_drops_candidates():
    records = [record("A", 10), record("B", 60), record("C", 49)]
    assert len(finalize(records, confidence_floor=0).detected_technologies) >= len(finalize(records).detected_technologies)


def test_ties_keep_detection_order():
    records = {n: record(n, 80) for n in ["Zeta", "Alpha", "Mu"]}
    records["Top"] = record("Top", 95)
    result = finalize(records)
    assert [r.name for r in result.detected_technologies] == ["Top", "Zeta", "Alpha", "Mu"]


def test_cms_is_highest_confidence_cms_record():
    result = finalize([
        record("jQuery", 100, JS_LIB),
        record("Drupal", 70, CMS),
        record("WordPress", 90, CMS),
    ])
    assert result.cms == "WordPress"
    assert result.cms_details.name == "WordPress"


def test_cms_tie_prefers_first_detected():
    result = finalize([record("Joomla", 80, CMS), record("Drupal", 80, CMS)])
    assert result.cms == "Joomla"


def test_cms_below_floor_is_not_selected():
    result = finalize([record("WordPress", 40, CMS), record("jQuery", 100, JS_LIB)])
    assert result.cms is None
    assert result.cms_details is None


def test_nothing_above_floor_gives_empty_result():
    result = finalize([record("A", 10, CMS)])
    assert result.detected_technologies == []
    assert result.cms is None


def test_to_dict_uses_external_shape():
    result = finalize([record("WordPress", 90, CMS)])
    data = result.to_dict()
    assert data["cms"] == "WordPress"
    assert data["cmsDetails"]["categories"] == [{"id": 1, "name": "CMS"}]
    assert [d["name"] for d in data["detectedTechnologies"]] == ["WordPress"]
