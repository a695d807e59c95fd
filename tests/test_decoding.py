"""Tests for the multi-strategy response decoder."""

import json

import pytest

from replate.client.base import DecodingError
from replate.client.decoding import (
    bare_list,
    decode_list,
    decode_object,
    extract_records,
    wrapped_list,
)
from replate.models import Ingredient, Preferences

KEYS = ("ingredients",)


def encode(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def decode_ingredients(payload) -> list[Ingredient]:
    return decode_list(encode(payload), KEYS, Ingredient.from_api_response)


class TestShapeIndependence:
    """The same logical list decodes identically in every envelope."""

    def test_envelopes_match(self, ingredient_records):
        """Test wrapped, bare and data-nested shapes give identical output."""
        wrapped = decode_ingredients({"ingredients": ingredient_records})
        bare = decode_ingredients(ingredient_records)
        nested = decode_ingredients({"data": {"ingredients": ingredient_records}})

        assert len(wrapped) == 3
        assert wrapped == bare == nested

    def test_list_under_data(self, ingredient_records):
        """Test a bare list under the data key."""
        assert decode_ingredients({"success": True, "data": ingredient_records}) == (
            decode_ingredients(ingredient_records)
        )

    def test_entity_key_nested_once(self, ingredient_records):
        """Test the entity key one object level down, under any key."""
        result = decode_ingredients({"result": {"ingredients": ingredient_records}})
        assert [item.name for item in result] == ["Milk", "Tomatoes", "Flour"]

    def test_empty_list(self):
        """Test an empty list is a valid, empty result."""
        assert decode_ingredients({"ingredients": []}) == []
        assert decode_ingredients([]) == []


class TestSingleObject:
    """A lone object where a list was expected becomes a one-element list."""

    def test_bare_record(self):
        result = decode_ingredients({"id": "1", "name": "Milk"})
        assert [item.id for item in result] == ["1"]

    def test_record_under_entity_key(self):
        result = decode_ingredients({"ingredients": {"id": "1", "name": "Milk"}})
        assert [item.name for item in result] == ["Milk"]

    def test_record_under_data(self):
        result = decode_ingredients({"data": {"_id": "1", "name": "Milk"}})
        assert [item.id for item in result] == ["1"]


class TestStrategyOrder:
    """Strategies are tried in order; the canonical shape wins."""

    def test_wrapped_preferred_over_data(self):
        """Test the entity key is used before the data probe."""
        payload = {
            "ingredients": [{"id": "a", "name": "Apple"}],
            "data": [{"id": "b", "name": "Banana"}],
        }
        assert [item.id for item in decode_ingredients(payload)] == ["a"]

    def test_custom_strategies(self, ingredient_records):
        """Test callers can restrict the ladder."""
        with pytest.raises(DecodingError):
            decode_list(
                encode({"ingredients": ingredient_records}),
                KEYS,
                Ingredient.from_api_response,
                strategies=(bare_list,),
            )

    def test_strategies_are_pure(self, ingredient_records):
        """Test strategies return None for shapes they do not handle."""
        assert wrapped_list(ingredient_records, KEYS) is None
        assert bare_list({"ingredients": ingredient_records}, KEYS) is None
        assert extract_records(ingredient_records, KEYS) is ingredient_records


class TestMalformedRecords:
    """Bad records are dropped without failing the batch."""

    def test_record_without_id_or_name_dropped(self):
        """Test a record missing id, _id and name is dropped."""
        payload = {
            "ingredients": [
                {"id": "1", "name": "Milk"},
                {"quantity": {"amount": 2, "unit": "cups"}, "category": "Dairy"},
            ]
        }
        result = decode_ingredients(payload)
        assert len(result) == 1
        assert result[0].name == "Milk"

    def test_non_object_items_dropped(self):
        """Test scalars inside the list are skipped."""
        result = decode_ingredients({"ingredients": ["oops", 3, None, {"name": "Salt"}]})
        assert [item.name for item in result] == ["Salt"]

    def test_name_without_id_kept(self):
        """Test a named record without id is kept with no identifier."""
        result = decode_ingredients([{"name": "Salt"}])
        assert result[0].id is None

    def test_oversized_numbers_do_not_abort_batch(self):
        """Test JSON integers too large for a float are handled per record."""
        raw = (
            b'[{"id": 1' + b"0" * 400 + b', "name": "X", "quantity": 1' + b"0" * 400 + b"},"
            b' {"id": "a", "name": "Milk", "expirationDate": {"_seconds": 1' + b"0" * 400 + b"}}]"
        )
        result = decode_list(raw, KEYS, Ingredient.from_api_response)

        assert [item.name for item in result] == ["X", "Milk"]
        assert result[0].id == "1" + "0" * 400
        assert result[0].quantity.amount == 1.0
        assert result[1].expiration_date is None

    def test_record_whose_build_fails_dropped(self):
        """Test a builder error drops only that record."""

        def build(record):
            if record["name"] == "Bad":
                raise ValueError("unusable record")
            return record["name"]

        raw = encode([{"name": "Bad"}, {"name": "Good"}])
        assert decode_list(raw, KEYS, build) == ["Good"]


class TestDecodingFailures:
    """DecodingError is raised only when every strategy fails."""

    @pytest.mark.parametrize(
        "raw",
        [b"", b"   ", b"not json", b"{truncated", b"\xff\xfe"],
    )
    def test_invalid_bodies(self, raw):
        """Test empty and non-JSON bodies."""
        with pytest.raises(DecodingError):
            decode_list(raw, KEYS, Ingredient.from_api_response)

    @pytest.mark.parametrize(
        "payload",
        [{"message": "ok"}, {"ingredients": "none"}, 42, "text", None],
    )
    def test_unrecognized_shapes(self, payload):
        """Test JSON that matches no strategy."""
        with pytest.raises(DecodingError):
            decode_ingredients(payload)


class TestDecodeObject:
    """Tests for single-object responses."""

    PREFS = {
        "dietaryRestrictions": ["Vegetarian"],
        "allergens": ["Peanuts"],
        "cuisinePreferences": ["Italian", "Indian"],
        "cookingTime": "30 minutes",
        "skillLevel": "Easy",
    }

    @pytest.mark.parametrize(
        "payload",
        [PREFS, {"preferences": PREFS}, {"success": True, "data": PREFS}],
    )
    def test_envelopes(self, payload):
        """Test bare, wrapped and data-nested objects."""
        prefs = decode_object(encode(payload), ("preferences",), Preferences.from_api_response)
        assert prefs.cuisine_preferences == ["Italian", "Indian"]
        assert prefs.skill_level == "Easy"

    def test_array_rejected(self):
        """Test a list where an object is expected."""
        with pytest.raises(DecodingError):
            decode_object(encode([self.PREFS]), ("preferences",), Preferences.from_api_response)
