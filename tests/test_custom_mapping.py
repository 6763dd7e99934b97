"""Tests for CustomMappingStrategy transformations."""

from datetime import date
from unittest.mock import patch

import pytest

from docgen.mapping.custom import CustomMappingStrategy, format_date_pattern


@pytest.fixture
def strategy():
    return CustomMappingStrategy()


class TestCustomMapping:
    """Test suite for CustomMappingStrategy."""

    def test_plain_extraction(self, strategy, enrollment_data):
        """Test expressions without a function name just extract."""
        assert strategy.map_field(enrollment_data, "f", "applicant.firstName") == "Jane"
        assert strategy.map_field(enrollment_data, "f", "applicants[1].name") == "John Doe"
        assert strategy.map_field(enrollment_data, "f", "jsonpath:$.applicants[type='PRIMARY'].name") == "Jane Doe"
        assert strategy.map_field(enrollment_data, "f", "jsonata:applicant.firstName & '!'") == "Jane!"

    def test_format_phone(self, strategy, enrollment_data):
        """Test US phone formatting from a direct path argument."""
        assert strategy.map_field(enrollment_data, "phone", "formatPhoneUS:applicant.phone") == "(555) 123-4567"

    def test_format_phone_wrong_length(self, strategy):
        """Test numbers that are not ten digits pass through."""
        assert strategy.map_field({"p": "12345"}, "phone", "formatPhoneUS:p") == "12345"

    def test_format_currency(self, strategy):
        """Test currency formatting with grouping."""
        assert strategy.map_field({"amount": 1234.5}, "a", "formatCurrency:amount") == "$1,234.50"
        assert strategy.map_field({}, "a", "formatCurrency:amount") == "$0.00"

    def test_format_date_patterns(self, strategy, enrollment_data):
        """Test date patterns are passed through as literal arguments."""
        assert strategy.map_field(
            enrollment_data, "d", "formatDate:applicants[0].dateOfBirth,MM/dd/yyyy"
        ) == "05/15/1990"
        assert strategy.map_field(
            enrollment_data, "d", "formatDate:applicants[0].dateOfBirth,MMMM dd yyyy"
        ) == "May 15 1990"

    def test_days_between(self, strategy, enrollment_data):
        """Test day differences between two resolved dates."""
        result = strategy.map_field(
            enrollment_data, "days", "calculateDaysBetween:applicants[0].dateOfBirth,applicants[1].dateOfBirth"
        )

        assert result == "828"

    def test_calculate_age(self, strategy):
        """Test age in whole years relative to today."""
        with patch("docgen.mapping.custom.date") as mock_date:
            mock_date.today.return_value = date(2024, 5, 14)
            mock_date.fromisoformat.side_effect = date.fromisoformat

            assert strategy.map_field({"dob": "1990-05-15"}, "age", "calculateAge:dob") == "33"

    def test_literal_and_numeric_arguments(self, strategy, enrollment_data):
        """Test quoted literals and bare integers are not treated as paths."""
        assert strategy.map_field(enrollment_data, "t", "truncate:'abcdefgh',3") == "abc..."
        assert strategy.map_field(enrollment_data, "r", "identity:'fixed'") == "fixed"
        assert len(strategy.map_field(enrollment_data, "r", "generateRandom:10")) == 10

    def test_string_helpers(self, strategy):
        """Test capitalization, space removal, encoding and hashing."""
        data = {"name": "jANE o'neil", "taxId": "123 45 6789"}

        assert strategy.map_field(data, "n", "capitalize:name") == "Jane O'neil"
        assert strategy.map_field(data, "s", "removeSpaces:taxId") == "123456789"
        assert strategy.map_field(data, "e", "encryptSSN:taxId") == "MTIzIDQ1IDY3ODk="
        assert len(strategy.map_field(data, "h", "hash:taxId")) == 16

    def test_unknown_function_maps_to_empty(self, strategy, enrollment_data):
        """Test an unknown transformation degrades to an empty field."""
        assert strategy.map_field(enrollment_data, "x", "shout:applicant.firstName") == ""

    def test_register_transformation(self, strategy, enrollment_data):
        """Test additional transformations can be registered."""
        strategy.register_transformation("Initials", lambda args: "".join(a[:1] for a in args))

        result = strategy.map_field(enrollment_data, "i", "initials:applicant.firstName,applicant.lastName")

        assert result == "JD"


class TestFormatDatePattern:
    """Test suite for format_date_pattern."""

    def test_tokens(self):
        """Test year, month, day and weekday tokens."""
        value = date(2024, 3, 9)

        assert format_date_pattern(value, "yyyy-MM-dd") == "2024-03-09"
        assert format_date_pattern(value, "M/d/yy") == "3/9/24"
        assert format_date_pattern(value, "MMM d, yyyy") == "Mar 9, 2024"
        assert format_date_pattern(value, "EEEE") == "Saturday"
