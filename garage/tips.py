"""Static maintenance tips served by the backend."""

from typing import Dict, List, Optional

GENERAL_TIPS: List[Dict] = [
    {"id": 1, "dica": "Check the oil level regularly."},
    {"id": 2, "dica": "Check tyre pressure weekly."},
]

TIPS_BY_KIND: Dict[str, List[Dict]] = {
    "carro": [{"id": 10, "dica": "Rotate the tyres every 10,000 km."}],
    "esportivo": [{"id": 15, "dica": "Use high-octane fuel only."}],
    "caminhao": [{"id": 30, "dica": "Inspect the air brake system daily."}],
}


def tips_for_kind(kind: str) -> Optional[List[Dict]]:
    """Tips for a vehicle kind (case-insensitive), None when none are registered."""
    return TIPS_BY_KIND.get(kind.lower())


def merge_tips(*groups: List[Dict]) -> List[Dict]:
    """Concatenate tip lists, one entry per id (later entries win, first position kept)."""
    merged: Dict[object, Dict] = {}
    for group in groups:
        for tip in group:
            merged[tip.get("id")] = tip
    return list(merged.values())
