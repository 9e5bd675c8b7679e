"""Error types raised while parsing and analyzing shot profiles.

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

from typing import List, Optional


class ProfileError(Exception):
    """Base class for every profile failure."""

    def __init__(self, message: str, details: Optional[List[str]] = None):
        """Initialize the error.

        Args:
            message: Error message
            details: Optional list of detailed messages
        """
        self.message = message
        self.details = details or []

        if self.details:
            lines = [message, ""]
            for i, detail in enumerate(self.details, 1):
                lines.append(f"{i}. {detail}")
            full_message = "\n".join(lines)
        else:
            full_message = message

        super().__init__(full_message)


class ProfileParseError(ProfileError):
    """Raised when document text does not follow the profile grammar."""

    def __init__(self, message: str, remaining: str = ""):
        """Initialize the parse error.

        Args:
            message: Error message
            remaining: Unconsumed input at the point of failure
        """
        self.remaining = remaining
        details = [f"near: {_excerpt(remaining)!r}"] if remaining else None
        super().__init__(message, details)


class MalformedValue(ProfileParseError):
    """A value or list did not have the expected shape."""


class UnrecognizedTag(ProfileParseError):
    """An enum tag was not one of the accepted values."""

    def __init__(self, tag: str, expected: List[str], remaining: str = ""):
        self.tag = tag
        self.expected = list(expected)
        super().__init__(
            f"Unrecognized tag {tag!r} (expected one of: {', '.join(expected)})",
            remaining,
        )


class UnterminatedString(ProfileParseError):
    """A brace-quoted string had no matching closing brace."""


class MissingRequiredProp(ProfileError):
    """A step or document lacks a value it must carry."""

    def __init__(self, key: str, where: str = "step"):
        self.key = key
        self.where = where
        super().__init__(f"Missing required '{key}' in {where}")


class UnknownPresetName(ProfileError, KeyError):
    """No preset with the requested name exists in the catalog."""

    def __init__(self, name: str):
        self.name = name
        ProfileError.__init__(self, f"Unknown preset: {name}")

    def __str__(self) -> str:
        return self.message


def _excerpt(text: str, limit: int = 40) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
