from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from models.technology import Category


@dataclass
class DetectionRecord:
    """A detected technology; only ever strengthened during a run."""
    name: str
    confidence: int
    version: Optional[str] = None
    categories: List[Category] = field(default_factory=list)
    website: Optional[str] = None
    icon: Optional[str] = None

    def has_category(self, category_id: int) -> bool:
        return any(c.id == category_id for c in self.categories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "version": self.version,
            "categories": [{"id": c.id, "name": c.name} for c in self.categories],
            "website": self.website,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of one detection run for one page."""
    cms: Optional[str] = None
    cms_details: Optional[DetectionRecord] = None
    detected_technologies: List[DetectionRecord] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DetectionResult":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cms": self.cms,
            "cmsDetails": self.cms_details.to_dict() if self.cms_details else None,
            "detectedTechnologies": [d.to_dict() for d in self.detected_technologies],
        }
