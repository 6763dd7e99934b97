"""Tests for the Direct, JSONPath and JSONata mapping strategies and the registry."""

from datetime import date

import pytest

from docgen.exceptions import DocGenError, InvalidOverflowConfig
from docgen.mapping.base import convert_to_string, is_truthy
from docgen.mapping.direct import DirectMappingStrategy, get_nested_value
from docgen.mapping.jsonata import JsonataMappingStrategy
from docgen.mapping.jsonpath import JsonPathMappingStrategy, normalize_jsonpath
from docgen.mapping.registry import MappingStrategyRegistry
from docgen.models.template import (
    FieldMappingGroup,
    IndexPosition,
    MappingType,
    PageSection,
    RepeatingGroupConfig,
    freeze_mapping,
)


class TestConversion:
    """Test suite for value-to-text conversion."""

    def test_convert_to_string(self):
        """Test the text form of each value kind."""
        assert convert_to_string(None) == ""
        assert convert_to_string(True) == "true"
        assert convert_to_string(42) == "42"
        assert convert_to_string(2.5) == "2.5"
        assert convert_to_string(date(2024, 3, 9)) == "03/09/2024"
        assert convert_to_string(["a", 1, None]) == "a, 1, "

    def test_is_truthy(self):
        """Test condition truthiness."""
        assert is_truthy(True)
        assert is_truthy("yes")
        assert is_truthy([1])
        assert not is_truthy(False)
        assert not is_truthy(None)
        assert not is_truthy("")
        assert not is_truthy("FALSE")


class TestDirectMapping:
    """Test suite for DirectMappingStrategy."""

    def setup_method(self):
        self.strategy = DirectMappingStrategy()

    def test_nested_path_with_index(self):
        """Test dotted paths step through mappings and list indexes."""
        assert get_nested_value({"a": {"b": [1, 2]}}, "a.b.1") == 2

    def test_missing_values(self):
        """Test missing keys and out-of-range indexes give None."""
        data = {"a": {"b": [1, 2]}}

        assert get_nested_value(data, "a.c") is None
        assert get_nested_value(data, "a.b.5") is None
        assert get_nested_value(data, "a.b.x") is None
        assert get_nested_value(None, "a") is None

    def test_navigating_into_scalar(self):
        """Test stepping into a scalar gives None."""
        assert get_nested_value({"a": "text"}, "a.b") is None

    def test_map_missing_field_is_empty(self, enrollment_data):
        """Test an unresolvable path maps to an empty string."""
        result = self.strategy.map(enrollment_data, {
            "first": "applicant.firstName",
            "city": "applicant.address.city",
            "missing": "applicant.middleName",
            "smoker": "smoker",
        })

        assert result == {"first": "Jane", "city": "Springfield", "missing": "", "smoker": "true"}

    def test_assign_path_copies(self):
        """Test assignment leaves the input untouched."""
        data = {"order": {"items": [1, 2, 3], "id": 7}}

        updated = self.strategy.assign_path(data, "order.items", [1])

        assert updated == {"order": {"items": [1], "id": 7}}
        assert data["order"]["items"] == [1, 2, 3]

    def test_assign_into_scalar_fails(self):
        """Test assignment through a scalar is rejected."""
        with pytest.raises(InvalidOverflowConfig):
            self.strategy.assign_path({"a": 1}, "a.b", [])


class TestJsonPathMapping:
    """Test suite for JsonPathMappingStrategy."""

    def setup_method(self):
        self.strategy = JsonPathMappingStrategy()

    def test_normalize(self):
        """Test relaxed paths gain a root and filter shorthand is expanded."""
        assert normalize_jsonpath("a.b") == "$.a.b"
        assert normalize_jsonpath("$.a.b") == "$.a.b"
        assert normalize_jsonpath("[0]") == "$[0]"
        assert normalize_jsonpath("applicants[type='PRIMARY'].name") == "$.applicants[?(@.type=='PRIMARY')].name"

    def test_single_match_unwrapped(self, enrollment_data):
        """Test a single match yields the value itself."""
        assert self.strategy.evaluate_path(enrollment_data, "applicant.firstName") == "Jane"
        assert self.strategy.evaluate_path(enrollment_data, "$.applicants[1].name") == "John Doe"

    def test_filter_shorthand(self, enrollment_data):
        """Test the [field='value'] shorthand selects matching elements."""
        assert self.strategy.evaluate_path(enrollment_data, "applicants[type='SPOUSE'].name") == "John Doe"

    def test_multiple_matches_are_a_list(self, enrollment_data):
        """Test several matches yield the list of values."""
        assert self.strategy.evaluate_path(enrollment_data, "children[*].name") == ["Ann", "Ben", "Cid"]
        assert self.strategy.map_field(enrollment_data, "kids", "children[*].name") == "Ann, Ben, Cid"

    def test_no_match(self, enrollment_data):
        """Test no match yields None and maps to an empty string."""
        assert self.strategy.evaluate_path(enrollment_data, "applicant.middleName") is None
        assert self.strategy.map_field(enrollment_data, "middle", "applicant.middleName") == ""

    def test_equality_condition(self, enrollment_data):
        """Test the path == 'literal' form used by conditions."""
        assert self.strategy.evaluate_path(enrollment_data, "status == 'ACTIVE'") is True
        assert self.strategy.evaluate_path(enrollment_data, "status == 'CLOSED'") is False
        assert self.strategy.evaluate_path(enrollment_data, "smoker == 'true'") is True

    def test_invalid_expression_maps_to_empty(self, enrollment_data):
        """Test a syntax error degrades to an empty field."""
        assert self.strategy.map_field(enrollment_data, "bad", "applicant[[") == ""

    def test_assign_path(self, enrollment_data):
        """Test the list at the path is replaced on a copy."""
        updated = self.strategy.assign_path(enrollment_data, "children[*]", [{"name": "Ann"}])

        assert updated["children"] == [{"name": "Ann"}]
        assert len(enrollment_data["children"]) == 3

    def test_assign_missing_path(self, enrollment_data):
        """Test assigning to a path that does not exist is rejected."""
        with pytest.raises(InvalidOverflowConfig):
            self.strategy.assign_path(enrollment_data, "dependents", [])


class TestJsonataMapping:
    """Test suite for JsonataMappingStrategy."""

    def setup_method(self):
        self.strategy = JsonataMappingStrategy()

    def test_concatenation(self, enrollment_data):
        """Test string concatenation expressions."""
        result = self.strategy.map_field(enrollment_data, "full", "applicant.firstName & ' ' & applicant.lastName")

        assert result == "Jane Doe"

    def test_filter_and_functions(self, enrollment_data):
        """Test predicates and built-in functions."""
        assert self.strategy.evaluate_path(enrollment_data, "applicants[type='PRIMARY'].name") == "Jane Doe"
        assert self.strategy.map_field(enrollment_data, "last", "$uppercase(applicant.lastName)") == "DOE"

    def test_missing_is_empty(self, enrollment_data):
        """Test an expression with no result maps to an empty string."""
        assert self.strategy.map_field(enrollment_data, "none", "applicant.nickname") == ""

    def test_assign_simple_path_only(self, enrollment_data):
        """Test only plain field paths can be assignment targets."""
        updated = self.strategy.assign_path(enrollment_data, "children", [])

        assert updated["children"] == []
        with pytest.raises(InvalidOverflowConfig):
            self.strategy.assign_path(enrollment_data, "children[age > 3]", [])


class TestMappingStrategyRegistry:
    """Test suite for MappingStrategyRegistry."""

    def setup_method(self):
        self.registry = MappingStrategyRegistry.create_default()

    def test_default_strategies(self):
        """Test every mapping type has a strategy."""
        for mapping_type in MappingType:
            assert self.registry.get(mapping_type).supports(mapping_type)

    def test_missing_strategy(self):
        """Test an empty registry raises for unknown types."""
        with pytest.raises(DocGenError):
            MappingStrategyRegistry().get(MappingType.DIRECT)

    def test_single_strategy_section(self, enrollment_data):
        """Test a section without groups uses its own mapping type."""
        section = PageSection(
            "cover",
            mapping_type=MappingType.DIRECT,
            field_mappings=freeze_mapping({"first": "applicant.firstName", "state": "applicant.address.state"}),
        )

        assert self.registry.resolve_fields(section, enrollment_data) == {"first": "Jane", "state": "IL"}

    def test_groups_later_wins(self, enrollment_data):
        """Test groups run in order and later groups overwrite earlier fields."""
        section = PageSection("cover", field_mapping_groups=(
            FieldMappingGroup(MappingType.JSONPATH, freeze_mapping({"name": "firstName", "city": "address.city"}),
                              base_path="applicant"),
            FieldMappingGroup(MappingType.JSONATA, freeze_mapping({"name": "applicant.firstName & ' ' & applicant.lastName"})),
        ))

        assert self.registry.resolve_fields(section, enrollment_data) == {"name": "Jane Doe", "city": "Springfield"}

    def test_unresolvable_base_path(self, enrollment_data):
        """Test every field is empty when the base path finds nothing."""
        group = FieldMappingGroup(MappingType.DIRECT, freeze_mapping({"a": "x", "b": "y"}), base_path="employer")

        assert self.registry.map_group(enrollment_data, group) == {"a": "", "b": ""}

    def test_repeating_group(self, enrollment_data):
        """Test list elements expand into numbered fields."""
        group = FieldMappingGroup(
            MappingType.JSONPATH,
            base_path="children",
            repeating_group=RepeatingGroupConfig(
                fields=freeze_mapping({"name": "name", "age": "age"}),
                prefix="child_",
                max_items=2,
            ),
        )

        assert self.registry.map_group(enrollment_data, group) == {
            "child_name_1": "Ann", "child_age_1": "7",
            "child_name_2": "Ben", "child_age_2": "5",
        }

    def test_repeating_group_index_before_field(self, enrollment_data):
        """Test BEFORE_FIELD placement and a custom start index."""
        group = FieldMappingGroup(
            MappingType.DIRECT,
            base_path="children",
            repeating_group=RepeatingGroupConfig(
                fields=freeze_mapping({"name": "name"}),
                start_index=0,
                index_separator=".",
                index_position=IndexPosition.BEFORE_FIELD,
            ),
        )

        assert self.registry.map_group(enrollment_data, group) == {"0.name": "Ann", "1.name": "Ben", "2.name": "Cid"}

    def test_repeating_group_requires_list(self, enrollment_data):
        """Test a non-list base path produces no fields."""
        group = FieldMappingGroup(
            MappingType.DIRECT,
            base_path="applicant",
            repeating_group=RepeatingGroupConfig(fields=freeze_mapping({"name": "firstName"})),
        )

        assert self.registry.map_group(enrollment_data, group) == {}
