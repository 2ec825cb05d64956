from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Suggestion:
    display_name: Optional[str]  # provider full-name text, shown as-is
    lat: float
    lng: float
    type: Optional[str]  # provider classification, e.g. "house", "city"
    importance: Optional[float] = None  # provider relevance; order is already applied upstream

    @classmethod
    def from_nominatim(cls, item: Dict[str, Any]) -> "Suggestion":
        """Map one Nominatim search element (string coordinates) to a Suggestion."""
        return cls(
            display_name=item.get("display_name"),
            lat=float(item["lat"]),
            lng=float(item["lon"]),
            type=item.get("type"),
            importance=item.get("importance"),
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Suggestion":
        """Parse the wire form returned by the autocomplete function."""
        return cls(
            display_name=payload.get("displayName"),
            lat=float(payload["lat"]),
            lng=float(payload["lng"]),
            type=payload.get("type"),
            importance=payload.get("importance"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "lat": self.lat,
            "lng": self.lng,
            "type": self.type,
            "importance": self.importance,
        }
