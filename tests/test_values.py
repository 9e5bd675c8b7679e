"""Tests for value readers."""

import pytest

from decent_profile_mcp.errors import MalformedValue, UnrecognizedTag, UnterminatedString
from decent_profile_mcp.models import (
    BeverageType,
    ExitType,
    ProfileType,
    PumpType,
    SensorType,
    TransitionType,
)
from decent_profile_mcp.values import (
    beverage_type_value,
    bool_value,
    braced_string_value,
    exit_type_value,
    number_value,
    plain_string_value,
    profile_type_value,
    pump_value,
    sensor_value,
    step_string_value,
    string_value,
    transition_value,
)


def test_bool_value():
    """Test reading 0 and 1."""
    assert bool_value("1 rest") == (True, " rest")
    assert bool_value("0") == (False, "")


def test_bool_value_invalid():
    """Test that anything other than 0 or 1 is rejected."""
    with pytest.raises(MalformedValue):
        bool_value("2")
    with pytest.raises(MalformedValue):
        bool_value("")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("8.5", 8.5),
        ("8.", 8.0),
        (".5", 0.5),
        ("98.00", 98.0),
        ("0.6", 0.6),
    ],
)
def test_number_value_float_forms(text, expected):
    """Test the float forms D.D, D. and .D."""
    value, rest = number_value(text)
    assert value == expected
    assert rest == ""


def test_number_value_integer_fallback():
    """Test that integers are widened to float."""
    value, rest = number_value("8;")
    assert value == 8.0
    assert isinstance(value, float)
    assert rest == ";"


def test_number_value_leading_dot():
    """Test a float with no integer part."""
    assert number_value(".8;") == (0.8, ";")


def test_number_value_stops_at_whitespace():
    """Test that the rest of the input is returned untouched."""
    assert number_value("25 seconds 3") == (25.0, " seconds 3")


def test_number_value_long_integer():
    """Test integers longer than five digits."""
    assert number_value("1234567") == (1234567.0, "")


@pytest.mark.parametrize("text", ["", "abc", "-1", "}", "\u0663 x", "\uff18"])
def test_number_value_invalid(text):
    """Test that non-numbers are rejected."""
    with pytest.raises(MalformedValue):
        number_value(text)


def test_transition_value():
    """Test transition tags."""
    assert transition_value("fast x") == (TransitionType.FAST, " x")
    assert transition_value("smooth}") == (TransitionType.SMOOTH, "}")


def test_transition_value_unrecognized():
    """Test that an unknown tag reports the token and the accepted tags."""
    with pytest.raises(UnrecognizedTag) as exc_info:
        transition_value("slow}")
    assert exc_info.value.tag == "slow"
    assert "fast" in exc_info.value.expected
    assert "smooth" in exc_info.value.expected
    assert exc_info.value.remaining == "slow}"


def test_sensor_value():
    """Test sensor tags."""
    assert sensor_value("coffee") == (SensorType.COFFEE, "")
    assert sensor_value("water pump") == (SensorType.WATER, " pump")


def test_pump_value():
    """Test pump tags."""
    assert pump_value("flow") == (PumpType.FLOW, "")
    assert pump_value("pressure ") == (PumpType.PRESSURE, " ")


def test_exit_type_value():
    """Test exit type tags."""
    assert exit_type_value("pressure_under") == (ExitType.PRESSURE_UNDER, "")
    assert exit_type_value("pressure_over 1") == (ExitType.PRESSURE_OVER, " 1")
    assert exit_type_value("flow_under") == (ExitType.FLOW_UNDER, "")
    assert exit_type_value("flow_over") == (ExitType.FLOW_OVER, "")


def test_exit_type_value_unrecognized():
    """Test an exit type that is not a known tag."""
    with pytest.raises(UnrecognizedTag):
        exit_type_value("weight_over")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("filter", BeverageType.FILTER),
        ("cleaning", BeverageType.CLEANING),
        ("Cleaning", BeverageType.CLEANING),
        ("ESPRESSO", BeverageType.ESPRESSO),
        ("pourover", BeverageType.POUROVER),
        ("tea", BeverageType.TEA_PORTAFILTER),
        ("tea_portafilter", BeverageType.TEA_PORTAFILTER),
    ],
)
def test_beverage_type_value(text, expected):
    """Test that beverage types are case-insensitive and accept the tea alias."""
    assert beverage_type_value(text) == (expected, "")


def test_beverage_type_value_keeps_original_rest():
    """Test that case folding does not alter the unconsumed input."""
    assert beverage_type_value("Manual Rest") == (BeverageType.MANUAL, " Rest")


def test_profile_type_value_longest_tag_first():
    """Test that settings_2c2 is not read as settings_2c."""
    assert profile_type_value("settings_2c2") == (ProfileType.SETTINGS_2C2, "")
    assert profile_type_value("settings_2c\n") == (ProfileType.SETTINGS_2C, "\n")
    assert profile_type_value("settings_2a") == (ProfileType.SETTINGS_2A, "")
    assert profile_type_value("settings_1") == (ProfileType.SETTINGS_1, "")


def test_profile_type_value_unrecognized():
    """Test an unknown profile type."""
    with pytest.raises(UnrecognizedTag) as exc_info:
        profile_type_value("settings_9 ")
    assert exc_info.value.tag == "settings_9"


def test_plain_string_value():
    """Test unquoted words."""
    assert plain_string_value("Decent rest") == ("Decent", " rest")
    assert plain_string_value("a}b rest") == ("a}b", " rest")
    assert plain_string_value("a\tb") == ("a", "\tb")
    assert plain_string_value("en\nprofile_notes") == ("en", "\nprofile_notes")


def test_braced_string_value():
    """Test brace-quoted strings."""
    assert braced_string_value("{Pressure Up} x") == ("Pressure Up", " x")
    assert braced_string_value("{}") == ("", "")


def test_braced_string_value_nested():
    """Test that nested braces are kept and only a depth-zero brace closes."""
    assert braced_string_value("{a {b} c}") == ("a {b} c", "")
    text = "{{exit_if 0 flow 4.0} {temperature 98.00 name {3 mL/s} seconds 60.00}}\nauthor Decent"
    value, rest = braced_string_value(text)
    assert value == "{exit_if 0 flow 4.0} {temperature 98.00 name {3 mL/s} seconds 60.00}"
    assert rest == "\nauthor Decent"


def test_braced_string_value_multiline():
    """Test that newlines inside braces are kept verbatim."""
    value, rest = braced_string_value("{first line\n\nafter blank line\nlast line}\n")
    assert value == "first line\n\nafter blank line\nlast line"
    assert rest == "\n"


def test_braced_string_value_requires_brace():
    """Test that the braced reader needs an opening brace."""
    with pytest.raises(MalformedValue):
        braced_string_value("Decent")


@pytest.mark.parametrize("text", ["{abc", "{a {b}", "{{}"])
def test_braced_string_value_unterminated(text):
    """Test that a brace with no matching close is an error."""
    with pytest.raises(UnterminatedString):
        braced_string_value(text)


def test_string_value_picks_form():
    """Test that string_value dispatches on the first character."""
    assert string_value("Decent") == ("Decent", "")
    assert string_value("{Decent}") == ("Decent", "")
    assert string_value("{Blooming espresso} x") == ("Blooming espresso", " x")


def test_step_string_value():
    """Test that an unquoted word inside a step ends at a closing brace."""
    assert step_string_value("Fill}") == ("Fill", "}")
    assert step_string_value("Fill seconds") == ("Fill", " seconds")
    assert step_string_value("{Pressure Up}}") == ("Pressure Up", "}")
