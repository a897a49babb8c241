"""Tests for mapping FoodData Central search hits to food records."""
from nosh.data_layer.models import Nutrient, ServingDefinition
from nosh.ingestion.search_mapper import (
    food_from_search_result,
    map_nutrients,
    map_servings,
    search_key,
)


def make_hit(**overrides):
    hit = {
        "fdcId": 2345,
        "description": "Yogurt, Greek, plain",
        "servingSize": 170.0,
        "servingSizeUnit": "g",
        "householdServingFullText": "1 container",
        "foodNutrients": [
            {"nutrientId": 1003, "value": 10.2},
            {"nutrientId": 1004, "value": 0.4},
            {"nutrientId": 1005, "value": 3.6},
            {"nutrientId": 1008, "value": 59.0},
            {"nutrientId": 1093, "value": 36.0},
        ],
    }
    hit.update(overrides)
    return hit


class TestSearchKey:
    """Tests for search_key."""

    def test_punctuation_becomes_underscores(self):
        assert search_key("Flour, potato") == "flour_potato"

    def test_edges_trimmed(self):
        assert search_key("  (Raw) Apple!  ") == "raw_apple"

    def test_empty_description(self):
        assert search_key("!!") == "food"


class TestMapNutrients:
    """Tests for map_nutrients."""

    def test_basic_mapping(self):
        nutrients = map_nutrients(make_hit())

        assert nutrients[Nutrient.PROTEIN] == 10.2
        assert nutrients[Nutrient.FAT] == 0.4
        assert nutrients[Nutrient.CARB] == 3.6
        assert nutrients[Nutrient.KCAL] == 59.0
        assert nutrients[Nutrient.SODIUM] == 36.0
        assert nutrients[Nutrient.FIBER] == 0.0

    def test_preferred_energy_id_wins(self):
        hit = make_hit(foodNutrients=[
            {"nutrientId": 1008, "value": 60.0},
            {"nutrientId": 2047, "value": 61.0},
            {"nutrientId": 2048, "value": 62.0},
        ])

        assert map_nutrients(hit)[Nutrient.KCAL] == 62.0

    def test_carb_by_summation_fallback(self):
        hit = make_hit(foodNutrients=[{"nutrientId": 1050, "value": 4.0}])

        assert map_nutrients(hit)[Nutrient.CARB] == 4.0

    def test_negative_values_clamped(self):
        hit = make_hit(foodNutrients=[{"nutrientId": 1005, "value": -0.1}])

        assert map_nutrients(hit)[Nutrient.CARB] == 0.0

    def test_missing_nutrient_list(self):
        hit = make_hit()
        del hit["foodNutrients"]

        assert map_nutrients(hit)[Nutrient.KCAL] == 0.0


class TestMapServings:
    """Tests for map_servings."""

    def test_serving_size_and_household(self):
        servings = map_servings(make_hit())

        assert servings == [
            ServingDefinition("serving", 170.0, reference=True),
            ServingDefinition("g", 1.0),
            ServingDefinition("container", 170.0),
        ]

    def test_household_with_count(self):
        servings = map_servings(make_hit(servingSize=30.0, householdServingFullText="2 slices"))

        assert servings[-1] == ServingDefinition("slices", 15.0)

    def test_no_serving_size_defaults_to_100g(self):
        hit = make_hit()
        del hit["servingSize"]
        del hit["servingSizeUnit"]

        assert map_servings(hit) == [
            ServingDefinition("serving", 100.0, reference=True),
            ServingDefinition("g", 1.0),
        ]

    def test_unparseable_household_skipped(self):
        servings = map_servings(make_hit(householdServingFullText="about a cup"))

        assert [s.unit for s in servings] == ["serving", "g"]

    def test_household_repeating_unit_skipped(self):
        servings = map_servings(make_hit(householdServingFullText="170 g"))

        assert [s.unit for s in servings] == ["serving", "g"]


class TestFoodFromSearchResult:
    """Tests for food_from_search_result."""

    def test_builds_record(self):
        food = food_from_search_result(make_hit())

        assert food.key == "yogurt_greek_plain"
        assert food.name == "Yogurt, Greek, plain"
        assert food.reference_serving.amount == 170.0

    def test_explicit_key(self):
        assert food_from_search_result(make_hit(), key="yogurt").key == "yogurt"

    def test_description_whitespace_collapsed(self):
        food = food_from_search_result(make_hit(description="  Yogurt,\n Greek  "))

        assert food.name == "Yogurt, Greek"
