import pytest

from ethkit.abi import Address
from ethkit.util import input_name, parse_address, safe_ident, to_snake_case


def test_input_name_to_ident_empty():
    assert input_name(0, "") == "p0"


def test_input_name_to_ident_keyword():
    assert input_name(0, "self") == "self_"


def test_input_name_to_ident_snake_case():
    assert input_name(0, "CamelCase1") == "camel_case_1"


def test_input_name_index_used_only_when_empty():
    assert input_name(3, "") == "p3"
    assert input_name(3, "arg_a") == "arg_a"


def test_parse_address_missing_prefix():
    with pytest.raises(ValueError):
        parse_address("0000000000000000000000000000000000000000")


def test_parse_address_address_too_short():
    with pytest.raises(ValueError):
        parse_address("0x00000000000000")


def test_parse_address_invalid_hex():
    with pytest.raises(ValueError):
        parse_address("0x" + "zz" * 20)


def test_parse_address_ok():
    expected = Address(bytes(range(20)))
    assert parse_address("0x000102030405060708090a0b0c0d0e0f10111213") == expected


def test_safe_ident_leaves_plain_names():
    assert safe_ident("value") == "value"
    assert safe_ident("type") == "type_"


def test_to_snake_case_keeps_snake_names():
    assert to_snake_case("arg_a") == "arg_a"
    assert to_snake_case("myMethod") == "my_method"