"""Parser for profile documents and the advanced-shot step language.

Copyright (C) 2024 Decent Profile MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from .errors import MalformedValue
from .models import (
    Command,
    CommandKey,
    ProfileCommand,
    Prop,
    PropKey,
    Step,
    StepProp,
    UnknownCommand,
    UnknownProp,
)
from .values import (
    beverage_type_value,
    bool_value,
    exit_type_value,
    number_value,
    profile_type_value,
    pump_value,
    sensor_value,
    step_string_value,
    string_value,
    transition_value,
)

T = TypeVar("T")
Reader = Callable[[str], Tuple[Any, str]]

_KEY_RE = re.compile(r"[A-Za-z0-9_]+")
_WS_RE = re.compile(r"\s+")

# Keys not listed here carry a number.
_PROP_KINDS: Dict[PropKey, Reader] = {
    PropKey.EXIT_IF: bool_value,
    PropKey.TRANSITION: transition_value,
    PropKey.NAME: step_string_value,
    PropKey.SENSOR: sensor_value,
    PropKey.PUMP: pump_value,
    PropKey.EXIT_TYPE: exit_type_value,
}

_COMMAND_KINDS: Dict[CommandKey, Reader] = {
    CommandKey.ADVANCED_SHOT: string_value,
    CommandKey.AUTHOR: string_value,
    CommandKey.BEVERAGE_TYPE: beverage_type_value,
    CommandKey.ESPRESSO_TEMPERATURE_STEPS_ENABLED: bool_value,
    CommandKey.PREINFUSION_GUARANTEE: bool_value,
    CommandKey.PROFILE_HIDE: bool_value,
    CommandKey.PROFILE_LANGUAGE: string_value,
    CommandKey.PROFILE_NOTES: string_value,
    CommandKey.PROFILE_TITLE: string_value,
    CommandKey.SETTINGS_PROFILE_TYPE: profile_type_value,
    CommandKey.BEAN_BRAND: string_value,
    CommandKey.BEAN_TYPE: string_value,
    CommandKey.GRINDER_MODEL: string_value,
    CommandKey.GRINDER_SETTING: string_value,
}

PROP_READERS: Dict[PropKey, Reader] = {key: _PROP_KINDS.get(key, number_value) for key in PropKey}
COMMAND_READERS: Dict[CommandKey, Reader] = {
    key: _COMMAND_KINDS.get(key, number_value) for key in CommandKey
}


def _lookup_key(enum_cls: Type[T], raw_key: str) -> Optional[T]:
    try:
        return enum_cls(raw_key)
    except ValueError:
        return None


def _key_value(
    text: str, enum_cls: Type[T], readers: Dict[T, Reader], unknown_reader: Reader
) -> Tuple[str, Optional[T], Any, str]:
    """Read ``key <whitespace> value``.

    Returns:
        Tuple of (raw_key, known_key_or_None, value, rest). Unknown keys
        have their value read with ``unknown_reader``.
    """
    match = _KEY_RE.match(text)
    if match is None:
        raise MalformedValue("Expected a key", text)
    raw_key = match.group()
    rest = text[match.end():]

    space = _WS_RE.match(rest)
    if space is None:
        raise MalformedValue(f"Expected whitespace after key '{raw_key}'", rest)
    rest = rest[space.end():]

    key = _lookup_key(enum_cls, raw_key)
    if key is None:
        value, rest = unknown_reader(rest)
    else:
        value, rest = readers[key](rest)
    return raw_key, key, value, rest


def prop(text: str) -> Tuple[StepProp, str]:
    """Read one step property."""
    raw_key, key, value, rest = _key_value(text, PropKey, PROP_READERS, step_string_value)
    if key is None:
        return UnknownProp(key=raw_key, value=value), rest
    return Prop(key=key, value=value), rest


def command(text: str) -> Tuple[ProfileCommand, str]:
    """Read one top-level command."""
    raw_key, key, value, rest = _key_value(text, CommandKey, COMMAND_READERS, string_value)
    if key is None:
        return UnknownCommand(key=raw_key, value=value), rest
    return Command(key=key, value=value), rest


def props(text: str) -> Tuple[List[StepProp], str]:
    """Read a whitespace-separated run of step properties.

    The run ends at end of input or at a closing brace; whitespace before
    the terminator is left unconsumed.
    """
    items: List[StepProp] = []
    if not text or text.startswith("}"):
        return items, text

    item, rest = prop(text)
    items.append(item)
    while True:
        space = _WS_RE.match(rest)
        if space is None:
            break
        after = rest[space.end():]
        if not after or after.startswith("}"):
            break
        item, rest = prop(after)
        items.append(item)
    return items, rest


def step(text: str) -> Tuple[Step, str]:
    """Read one ``{...}`` step."""
    if not text.startswith("{"):
        raise MalformedValue("Expected '{' opening a step", text)
    items, rest = props(text[1:].lstrip())
    rest = rest.lstrip()
    if not rest.startswith("}"):
        raise MalformedValue("Expected '}' closing a step", rest)
    return Step(props=items), rest[1:]


def steps(text: str) -> Tuple[List[Step], str]:
    """Read a sequence of steps separated by optional whitespace.

    Reading stops before the first non-whitespace character that does
    not open a step; the whitespace in front of it is not consumed.
    """
    items: List[Step] = []
    rest = text
    while True:
        candidate = rest.lstrip()
        if not candidate.startswith("{"):
            break
        item, rest = step(candidate)
        items.append(item)
    return items, rest


def commands(text: str) -> Tuple[List[ProfileCommand], str]:
    """Read a sequence of top-level commands separated by optional whitespace."""
    items: List[ProfileCommand] = []
    rest = text
    while True:
        candidate = rest.lstrip()
        if not _KEY_RE.match(candidate):
            break
        item, rest = command(candidate)
        items.append(item)
    return items, rest


def _expect_end(rest: str) -> None:
    if rest.strip():
        raise MalformedValue("Unexpected trailing input", rest.lstrip())


def parse_steps(text: str) -> List[Step]:
    """Parse a complete advanced-shot step sequence.

    Args:
        text: Step-sequence text, e.g. ``"{flow 4 seconds 10 ...} {...}"``

    Returns:
        Steps in source order

    Raises:
        ProfileParseError: If the text is not a well-formed step sequence
    """
    items, rest = steps(text)
    _expect_end(rest)
    return items


def parse_commands(text: str) -> List[ProfileCommand]:
    """Parse a complete profile document into its commands.

    Raises:
        ProfileParseError: If any part of the document is malformed
    """
    items, rest = commands(text)
    _expect_end(rest)
    return items
