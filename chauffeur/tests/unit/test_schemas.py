import pytest
from decimal import Decimal
from pydantic import ValidationError

from chauffeur.schemas.common import to_decimal
from chauffeur.schemas.pricing import DistanceTier, PricingConfig, check_tiers
from chauffeur.schemas.quote import QuoteRequest
from chauffeur.utils.hashing import cache_key


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    (None, Decimal("0")),
    (True, Decimal("0")),
    ("12.50", Decimal("12.5")),
    (" 3 ", Decimal("3")),
    (7.25, Decimal("7.25")),
    ("abc", Decimal("0")),
    (float("nan"), Decimal("0")),
    ("Infinity", Decimal("0")),
])
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.unit
def test_missing_config_sections_get_defaults():
    config = PricingConfig.model_validate({"pricingType": "p2p", "extras": None})

    assert config.point_to_point is None
    assert config.extras.congestion_charge == 0
    assert config.coverage_zone == "Entire UK Cover"
    assert config.display_vat_inclusive is True


@pytest.mark.unit
def test_gaps_between_tiers_are_allowed():
    tiers = [
        DistanceTier(from_distance=9, to_distance=30, price=2, kind="per_mile"),
        DistanceTier(from_distance=0, to_distance=8, price=70),
    ]
    ordered = check_tiers(tiers)
    assert [t.from_distance for t in ordered] == [0, 9]


@pytest.mark.unit
def test_overlapping_tiers_are_rejected():
    tiers = [
        DistanceTier(from_distance=0, to_distance=10, price=70),
        DistanceTier(from_distance=8, to_distance=30, price=2, kind="per_mile"),
    ]
    with pytest.raises(ValueError, match="overlaps"):
        check_tiers(tiers)


@pytest.mark.unit
class TestQuoteRequest:

    def test_miles_from_km(self):
        req = QuoteRequest.model_validate({"vehicleId": 1, "distanceKm": 10})
        assert req.miles == Decimal("6.21371")

    def test_miles_take_precedence(self):
        req = QuoteRequest.model_validate({"vehicleId": 1, "distanceMiles": 12.5, "distanceKm": 100})
        assert req.miles == Decimal("12.5")

    def test_distance_required(self):
        with pytest.raises(ValidationError):
            QuoteRequest.model_validate({"vehicleId": 1})

    def test_cache_key_is_stable(self):
        first = QuoteRequest.model_validate({"vehicleId": 1, "distanceMiles": 20})
        second = QuoteRequest.model_validate({"distanceMiles": 20, "vehicleId": 1})

        assert cache_key("quote", first.model_dump(mode="json")) == cache_key("quote", second.model_dump(mode="json"))
        assert cache_key("quote", first.model_dump(mode="json")).startswith("quote:")
