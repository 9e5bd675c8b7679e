"""Profile documents and the presets derived from them.

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

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import MissingRequiredProp
from .models import (
    ADVANCED_PROFILE_TYPE,
    BeverageType,
    Command,
    CommandKey,
    Preset,
    ProfileCommand,
    ProfileType,
    Step,
    UnknownCommand,
)
from .parser import parse_commands, parse_steps


class Profile(BaseModel):
    """The parsed form of one profile document."""

    model_config = ConfigDict(frozen=True)

    commands: List[ProfileCommand] = Field(default_factory=list, description="Commands in source order")

    @classmethod
    def from_text(cls, text: str) -> "Profile":
        """Parse a profile document.

        Args:
            text: Document text

        Returns:
            Profile object

        Raises:
            ProfileParseError: If the document is malformed
        """
        return cls(commands=parse_commands(text.lstrip("\ufeff")))

    def get(self, key: CommandKey) -> Optional[Any]:
        """Get the value of the first command with the given key."""
        for cmd in self.commands:
            if isinstance(cmd, Command) and cmd.key is key:
                return cmd.value
        return None

    def is_profile_type(self, profile_type: ProfileType) -> bool:
        return any(
            isinstance(cmd, Command) and cmd.key is CommandKey.SETTINGS_PROFILE_TYPE and cmd.value is profile_type
            for cmd in self.commands
        )

    def is_advanced(self) -> bool:
        return self.is_profile_type(ADVANCED_PROFILE_TYPE)

    def profile_type(self) -> Optional[ProfileType]:
        return self.get(CommandKey.SETTINGS_PROFILE_TYPE)

    def title(self) -> Optional[str]:
        return self.get(CommandKey.PROFILE_TITLE)

    def notes(self) -> Optional[str]:
        return self.get(CommandKey.PROFILE_NOTES)

    def author(self) -> Optional[str]:
        return self.get(CommandKey.AUTHOR)

    def beverage_type(self) -> Optional[BeverageType]:
        return self.get(CommandKey.BEVERAGE_TYPE)

    def advanced_shot(self) -> Optional[str]:
        """Get the raw step-sequence text, terminated by a newline."""
        data = self.get(CommandKey.ADVANCED_SHOT)
        if data is None:
            return None
        return f"{data}\n"

    def steps(self) -> List[Step]:
        """Parse the advanced-shot text into steps.

        Raises:
            MissingRequiredProp: If the document has no ``advanced_shot``
            ProfileParseError: If the step text is malformed
        """
        data = self.advanced_shot()
        if data is None:
            raise MissingRequiredProp(CommandKey.ADVANCED_SHOT.value, where="profile")
        return parse_steps(data)

    def unknown_keys(self) -> List[str]:
        return [cmd.key for cmd in self.commands if isinstance(cmd, UnknownCommand)]


def build_preset(name: str, profile: Profile) -> Preset:
    """Create a preset from an advanced profile.

    Args:
        name: Preset name (the source document name)
        profile: Parsed profile

    Returns:
        Preset object

    Raises:
        MissingRequiredProp: If title, notes or advanced shot is missing
    """
    where = f"profile '{name}'"
    title = profile.title()
    if title is None:
        raise MissingRequiredProp(CommandKey.PROFILE_TITLE.value, where=where)
    notes = profile.notes()
    if notes is None:
        raise MissingRequiredProp(CommandKey.PROFILE_NOTES.value, where=where)
    advanced_shot = profile.advanced_shot()
    if advanced_shot is None:
        raise MissingRequiredProp(CommandKey.ADVANCED_SHOT.value, where=where)

    return Preset(name=name, title=title, notes=notes, advanced_shot=advanced_shot)


def parse_profile(text: str) -> Profile:
    """Parse a complete profile document.

    Raises:
        ProfileParseError: If the document is malformed
    """
    return Profile.from_text(text)
