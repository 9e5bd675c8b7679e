"""Tests for profile documents and presets."""

from pathlib import Path

import pytest

from decent_profile_mcp.errors import MalformedValue, MissingRequiredProp, UnterminatedString
from decent_profile_mcp.models import BeverageType, Preset, ProfileType, Prop, PropKey
from decent_profile_mcp.profile import Profile, build_preset, parse_profile

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixture_profile():
    """Parse the fixture document."""
    return parse_profile((FIXTURES / "profile.tcl").read_text(encoding="utf-8"))


def test_profile_fields(fixture_profile):
    """Test the typed accessors."""
    assert fixture_profile.title() == "Filter 2.1"
    assert fixture_profile.notes() == "first line\n\nafter blank line\nlast line"
    assert fixture_profile.author() == "Decent"
    assert fixture_profile.beverage_type() is BeverageType.POUROVER
    assert fixture_profile.profile_type() is ProfileType.SETTINGS_2C


def test_profile_is_advanced(fixture_profile):
    """Test the profile type checks."""
    assert fixture_profile.is_advanced()
    assert fixture_profile.is_profile_type(ProfileType.SETTINGS_2C)
    assert not fixture_profile.is_profile_type(ProfileType.SETTINGS_2C2)


def test_profile_advanced_shot_is_newline_terminated(fixture_profile):
    """Test that the raw step text gets a trailing newline."""
    assert fixture_profile.advanced_shot() == (
        "{exit_if 0 flow 4.0} {temperature 98.00 name {3 mL/s} seconds 60.00}\n"
    )


def test_profile_steps(fixture_profile):
    """Test parsing the nested step sequence."""
    steps = fixture_profile.steps()
    assert len(steps) == 2
    assert steps[0].props == [
        Prop(key=PropKey.EXIT_IF, value=False),
        Prop(key=PropKey.FLOW, value=4.0),
    ]
    assert steps[1].value(PropKey.NAME) == "3 mL/s"
    assert steps[1].seconds() == 60.0


def test_profile_strips_byte_order_mark():
    """Test a document starting with a UTF-8 byte order mark."""
    profile = Profile.from_text("\ufeffprofile_title {Rao Allongé}\n")
    assert profile.title() == "Rao Allongé"


def test_profile_get_returns_first_occurrence():
    """Test that a repeated command resolves to its first value."""
    profile = Profile.from_text("profile_title {A}\nprofile_title {B}\n")
    assert profile.title() == "A"


def test_profile_missing_values_are_none():
    """Test accessors on a document without those commands."""
    profile = Profile.from_text("author Decent")
    assert profile.title() is None
    assert profile.notes() is None
    assert profile.advanced_shot() is None
    assert profile.profile_type() is None
    assert not profile.is_advanced()


def test_profile_unknown_keys():
    """Test that unknown commands are kept and listed."""
    profile = Profile.from_text("profile_title {A}\nbean_notes fruity\nroast_date {2024-05-01}\n")
    assert profile.title() == "A"
    assert profile.unknown_keys() == ["bean_notes", "roast_date"]


def test_profile_empty_document():
    """Test that an empty document has no commands."""
    assert Profile.from_text("").commands == []
    assert Profile.from_text("\n\n").commands == []


def test_profile_malformed_document():
    """Test that any malformed command rejects the document."""
    with pytest.raises(UnterminatedString):
        Profile.from_text("profile_title {A\nauthor Decent")
    with pytest.raises(MalformedValue):
        Profile.from_text("espresso_temperature hot")


def test_profile_steps_missing_advanced_shot():
    """Test asking for steps of a document without a step sequence."""
    with pytest.raises(MissingRequiredProp) as exc_info:
        Profile.from_text("profile_title {A}").steps()
    assert exc_info.value.key == "advanced_shot"


def test_build_preset(fixture_profile):
    """Test creating a preset from an advanced profile."""
    preset = build_preset("filter_2_1.tcl", fixture_profile)
    assert preset == Preset(
        name="filter_2_1.tcl",
        title="Filter 2.1",
        notes="first line\n\nafter blank line\nlast line",
        advanced_shot="{exit_if 0 flow 4.0} {temperature 98.00 name {3 mL/s} seconds 60.00}\n",
    )


@pytest.mark.parametrize(
    "text,missing",
    [
        ("profile_notes {n} advanced_shot {}", "profile_title"),
        ("profile_title {t} advanced_shot {}", "profile_notes"),
        ("profile_title {t} profile_notes {n}", "advanced_shot"),
    ],
)
def test_build_preset_missing_required(text, missing):
    """Test that title, notes and advanced shot are each required."""
    with pytest.raises(MissingRequiredProp) as exc_info:
        build_preset("broken.tcl", Profile.from_text(text))
    assert exc_info.value.key == missing
    assert "broken.tcl" in exc_info.value.where
