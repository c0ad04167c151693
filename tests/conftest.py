from __future__ import annotations

import copy
from typing import Any, Callable, Dict

import pytest

_HOTEL_PAYLOAD: Dict[str, Any] = {
    "status": True,
    "message": "Success",
    "data": {
        "hotel_id": 191605,
        "hotel_name": "Harbour View Hotel",
        "address": "1 Quay Street",
        "city": "Auckland",
        "country_trans": "New Zealand",
        "latitude": -36.84,
        "longitude": 174.76,
        "review_score": 8.6,
        "review_nr": 1204,
        "reviewScoreWord": "Fabulous",
        "propertyClass": 4,
        "composite_price_breakdown": {
            "gross_amount": {"value": 200.0, "currency": "USD"},
        },
        "facilities_block": {
            "facilities": [{"name": "Free WiFi"}, {"name": "Fitness centre"}, {}],
        },
        "rooms": {
            "101": {
                "room_name": "Deluxe King",
                "nr_adults": 2,
                "nr_children": 1,
                "facilities": [{"name": "Air conditioning"}, {"name": "Minibar"}],
                "photos": [
                    {"url_max1280": "https://img.example/101-a.jpg"},
                    {"url_original": "https://img.example/101-raw.jpg"},
                ],
                "mealplan": "Breakfast included",
                "room_surface_in_m2": 32,
                "breakfast_included": True,
            },
            "102": {
                "photos": [{"url_max1280": "https://img.example/102-a.jpg"}],
            },
        },
    },
}


@pytest.fixture
def hotel_payload() -> Dict[str, Any]:
    return copy.deepcopy(_HOTEL_PAYLOAD)


@pytest.fixture
def make_hotel_payload() -> Callable[..., Dict[str, Any]]:
    def _make(**data_overrides: Any) -> Dict[str, Any]:
        payload = copy.deepcopy(_HOTEL_PAYLOAD)
        payload["data"].update(data_overrides)
        return payload

    return _make
