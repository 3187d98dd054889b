"""Rental offering catalog: button labels, canonical names and listing order."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "vacuum": {
        "name": "Vacuum cleaner rental Karcher Puzzi 8/1 C",
        "label": "🧹 Puzzi 8/1 C vacuum",
        "emoji": "🧹",
        "keyword": "vacuum",
        "rank": 1,
    },
    "steam": {
        "name": "Steam cleaner rental Karcher SC 4 Deluxe",
        "label": "💨 SC 4 steam cleaner",
        "emoji": "💨",
        "keyword": "steam",
        "rank": 2,
    },
    "washer": {
        "name": "Pressure washer rental Karcher K 5 Full Control",
        "label": "💦 K 5 pressure washer",
        "emoji": "💦",
        "keyword": "washer",
        "rank": 3,
    },
}

OTHER_SERVICE_RANK = 4
OTHER_SERVICE_EMOJI = "📦"


def get_service_labels() -> list[str]:
    """Return the picker button labels in catalog order."""
    return [info["label"] for info in SERVICE_CATALOG.values()]


def match_service_label(text: str) -> Optional[str]:
    """Map a picker button label to its canonical service name."""
    for info in SERVICE_CATALOG.values():
        if text == info["label"]:
            return info["name"]
    return None


def match_service_key(text: str) -> Optional[str]:
    """Map a bare catalog key ("vacuum", "Steam") to its canonical name."""
    info = SERVICE_CATALOG.get(text.strip().lower())
    return info["name"] if info else None


def service_rank(service_name: str) -> int:
    """Listing rank by keyword found in a stored service name.

    vacuum < steam < washer < anything else.
    """
    lower = service_name.lower()
    for info in sorted(SERVICE_CATALOG.values(), key=lambda i: i["rank"]):
        if info["keyword"] in lower:
            return info["rank"]
    return OTHER_SERVICE_RANK


def service_emoji(service_name: str) -> str:
    """Pick the listing emoji for a stored service name."""
    rank = service_rank(service_name)
    for info in SERVICE_CATALOG.values():
        if info["rank"] == rank:
            return info["emoji"]
    return OTHER_SERVICE_EMOJI
