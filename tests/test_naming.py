import pytest

from protoc_gunk.naming import camel_to_snake, force_camel_identifier, snake_to_camel


class TestCamelToSnake:
    @pytest.mark.parametrize("name, expected", [
        ("field_name", "field_name"),
        ("fieldName", "field_name"),
        ("FieldName", "field_name"),
        ("userID", "user_id"),
        ("HTTPServer", "http_server"),
        ("id", "id"),
        ("", ""),
    ])
    def test_conversion(self, name, expected):
        assert camel_to_snake(name) == expected


class TestSnakeToCamel:
    def test_initialisms_are_upper_cased(self):
        assert snake_to_camel("order_id") == "OrderID"
        assert snake_to_camel("api_url") == "APIURL"

    def test_empty_words_are_dropped(self):
        assert snake_to_camel("_private__name_") == "PrivateName"


class TestForceCamelIdentifier:
    @pytest.mark.parametrize("name, expected", [
        ("customer_name", "CustomerName"),
        ("customerName", "CustomerName"),
        ("user_id", "UserID"),
        ("msg", "Msg"),
        ("field1_name", "Field1Name"),
    ])
    def test_conversion(self, name, expected):
        assert force_camel_identifier(name) == expected

    def test_leading_digit(self):
        assert force_camel_identifier("1st") == "_1st"

    def test_empty(self):
        assert force_camel_identifier("_") == "_"
