"""Typed token readers for profile documents.

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

Every reader takes the remaining input and returns a ``(value, rest)``
tuple, consuming the longest valid token at the start of the input. A
reader that cannot match raises a ``ProfileParseError`` subclass.
"""

import re
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Type, TypeVar

from .errors import MalformedValue, UnrecognizedTag, UnterminatedString
from .models import BeverageType, ExitType, ProfileType, PumpType, SensorType, TransitionType

E = TypeVar("E", bound=Enum)

_FLOAT_RE = re.compile(r"[0-9]+\.[0-9]*|\.[0-9]+")
_INT_RE = re.compile(r"[0-9]+")
_PLAIN_STRING_RE = re.compile(r"\S*")
_STEP_WORD_RE = re.compile(r"[^\s}]*")
_TOKEN_RE = re.compile(r"[^\s{}]*")


def bool_value(text: str) -> Tuple[bool, str]:
    """Read ``0`` or ``1``."""
    if text[:1] == "1":
        return True, text[1:]
    if text[:1] == "0":
        return False, text[1:]
    raise MalformedValue("Expected boolean '0' or '1'", text)


def number_value(text: str) -> Tuple[float, str]:
    """Read an unsigned number.

    The float forms ``D.``, ``D.D`` and ``.D`` are tried first; a plain
    integer is accepted as a fallback and widened to float.
    """
    match = _FLOAT_RE.match(text) or _INT_RE.match(text)
    if match is None:
        raise MalformedValue("Expected a number", text)
    return float(match.group()), text[match.end():]


def _tag_reader(
    enum_cls: Type[E],
    aliases: Optional[Dict[str, E]] = None,
    ignore_case: bool = False,
) -> Callable[[str], Tuple[E, str]]:
    """Build a reader matching the tags of an enum.

    Tags are tried longest first so that a tag is never shadowed by a
    shorter tag it starts with (``settings_2c2`` before ``settings_2c``).
    """
    table = {member.value: member for member in enum_cls}
    for alias, target in (aliases or {}).items():
        table[alias] = target
    ordered = sorted(table, key=len, reverse=True)
    expected = [member.value for member in enum_cls]

    def read(text: str) -> Tuple[E, str]:
        probe = text.lower() if ignore_case else text
        for tag in ordered:
            if probe.startswith(tag):
                return table[tag], text[len(tag):]
        token = _TOKEN_RE.match(text).group()
        raise UnrecognizedTag(token, expected, text)

    read.__name__ = f"{enum_cls.__name__.lower()}_value"
    return read


transition_value = _tag_reader(TransitionType)
sensor_value = _tag_reader(SensorType)
pump_value = _tag_reader(PumpType)
exit_type_value = _tag_reader(ExitType)
beverage_type_value = _tag_reader(
    BeverageType,
    aliases={"tea": BeverageType.TEA_PORTAFILTER},
    ignore_case=True,
)
profile_type_value = _tag_reader(ProfileType)


def braced_string_value(text: str) -> Tuple[str, str]:
    """Read a brace-quoted string, honouring nested braces.

    Only a closing brace at nesting depth zero ends the string, so
    embedded ``{...}`` groups are kept verbatim.

    Raises:
        MalformedValue: If the input does not start with ``{``
        UnterminatedString: If no matching ``}`` exists
    """
    if not text.startswith("{"):
        raise MalformedValue("Expected '{'", text)

    depth = 0
    for index in range(1, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                return text[1:index], text[index + 1:]
            depth -= 1
    raise UnterminatedString("Unterminated '{' string", text)


def plain_string_value(text: str) -> Tuple[str, str]:
    """Read an unquoted word, up to the next whitespace."""
    match = _PLAIN_STRING_RE.match(text)
    return match.group(), text[match.end():]


def string_value(text: str) -> Tuple[str, str]:
    """Read either a brace-quoted string or an unquoted word."""
    if text.startswith("{"):
        return braced_string_value(text)
    return plain_string_value(text)


def step_string_value(text: str) -> Tuple[str, str]:
    """Read a string inside a step.

    An unquoted word also ends at ``}``, so ``{name Fill}`` closes the step.
    """
    if text.startswith("{"):
        return braced_string_value(text)
    match = _STEP_WORD_RE.match(text)
    return match.group(), text[match.end():]
