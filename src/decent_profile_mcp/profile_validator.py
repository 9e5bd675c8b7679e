"""Structural validation and linting of profile documents.

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

from collections import Counter
from typing import List, Optional, Tuple

from .errors import MissingRequiredProp, ProfileError, ProfileParseError, UnrecognizedTag
from .models import ADVANCED_PROFILE_TYPE, ExitType, Prop, PropKey, PumpType, Step
from .parser import parse_steps
from .profile import Profile

_EXIT_THRESHOLDS = {
    ExitType.FLOW_OVER: PropKey.EXIT_FLOW_OVER,
    ExitType.FLOW_UNDER: PropKey.EXIT_FLOW_UNDER,
    ExitType.PRESSURE_OVER: PropKey.EXIT_PRESSURE_OVER,
    ExitType.PRESSURE_UNDER: PropKey.EXIT_PRESSURE_UNDER,
}


class ProfileValidationError(ProfileError):
    """Raised when profile validation fails."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        """Initialize validation error.

        Args:
            message: Error message
            errors: List of detailed validation errors
        """
        self.errors = errors or []
        super().__init__(message, self.errors)


def _step_label(index: int, step: Step) -> str:
    name = step.value(PropKey.NAME)
    if name:
        return f"Step {index} ('{name}')"
    return f"Step {index}"


class ProfileValidator:
    """Validates profile documents against the profile grammar."""

    def __init__(self, require_advanced: bool = True):
        """Initialize the validator.

        Args:
            require_advanced: Whether documents must be advanced
                (``settings_2c``) profiles to be valid
        """
        self.require_advanced = require_advanced

    def validate(self, text: str) -> Tuple[bool, List[str]]:
        """Validate a profile document.

        Args:
            text: Profile document text

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        try:
            profile = Profile.from_text(text)
        except ProfileParseError as e:
            return False, [self._format_error(e)]

        errors = []
        if self.require_advanced and not profile.is_advanced():
            found = profile.profile_type()
            errors.append(
                f"settings_profile_type is {found.value if found else 'missing'}; "
                f"only {ADVANCED_PROFILE_TYPE.value} (advanced) profiles are supported"
            )
        if profile.title() is None:
            errors.append("Missing required command 'profile_title'")
        if profile.notes() is None:
            errors.append("Missing required command 'profile_notes'")

        if profile.advanced_shot() is None:
            errors.append("Missing required command 'advanced_shot'")
        else:
            errors.extend(self._validate_steps(profile))

        return len(errors) == 0, errors

    def validate_and_raise(self, text: str) -> None:
        """Validate a profile document and raise if it is invalid.

        Raises:
            ProfileValidationError: If validation fails (includes all errors in message)
        """
        is_valid, errors = self.validate(text)
        if not is_valid:
            raise ProfileValidationError(f"Profile validation failed with {len(errors)} error(s)", errors)

    def _validate_steps(self, profile: Profile) -> List[str]:
        try:
            steps = profile.steps()
        except ProfileParseError as e:
            return [f"advanced_shot: {self._format_error(e)}"]

        errors = []
        for index, step in enumerate(steps, 1):
            for read in (step.seconds, step.transition, step.pump):
                try:
                    read()
                except MissingRequiredProp as e:
                    errors.append(f"{_step_label(index, step)} is missing required '{e.key}'")
        return errors

    def _format_error(self, error: ProfileError) -> str:
        """Format a parse error into a readable message."""
        message = error.message
        if isinstance(error, UnrecognizedTag):
            message = f"Unrecognized value '{error.tag}' (expected one of: {', '.join(error.expected)})"
        remaining = getattr(error, "remaining", "").strip()
        if remaining:
            return f"{message} near '{remaining.splitlines()[0][:40]}'"
        return message

    def lint(self, text: str) -> List[str]:
        """Lint a profile document and return warnings.

        Documents that do not parse produce no warnings; ``validate``
        reports those.

        Args:
            text: Profile document text

        Returns:
            List of linting warnings
        """
        try:
            profile = Profile.from_text(text)
        except ProfileParseError:
            return []

        warnings = []
        for key in profile.unknown_keys():
            warnings.append(f"Unknown command '{key}' is kept but not interpreted")

        if not self.require_advanced and not profile.is_advanced():
            warnings.append("Profile is not an advanced (settings_2c) profile and will not appear in the catalog")

        if profile.advanced_shot() is None:
            return warnings
        try:
            steps = parse_steps(profile.advanced_shot())
        except ProfileParseError:
            return warnings

        if not steps:
            warnings.append("advanced_shot has no steps")

        for index, step in enumerate(steps, 1):
            warnings.extend(self._lint_step(_step_label(index, step), step))

        return warnings

    def _lint_step(self, label: str, step: Step) -> List[str]:
        warnings = []

        for prop in step.unknown_props():
            warnings.append(f"{label} has unknown property '{prop.key}'")

        counts = Counter(prop.key for prop in step.props if isinstance(prop, Prop))
        for key, count in counts.items():
            if count > 1:
                warnings.append(f"{label} repeats '{key.value}' {count} times; lookups use the first")

        pump = step.value(PropKey.PUMP)
        if pump is PumpType.PRESSURE and step.get(PropKey.PRESSURE) is None:
            warnings.append(f"{label} pumps pressure but sets no 'pressure' target")
        elif pump is PumpType.FLOW and step.get(PropKey.FLOW) is None:
            warnings.append(f"{label} pumps flow but sets no 'flow' target")

        exit_type = step.value(PropKey.EXIT_TYPE)
        if step.value(PropKey.EXIT_IF) is True:
            if exit_type is None:
                warnings.append(f"{label} has exit_if 1 but no 'exit_type'")
            elif step.get(_EXIT_THRESHOLDS[exit_type]) is None:
                warnings.append(
                    f"{label} exits on {exit_type.value} but has no '{_EXIT_THRESHOLDS[exit_type].value}' threshold"
                )
        elif exit_type is not None:
            warnings.append(f"{label} sets exit_type {exit_type.value} but exit_if is off")

        return warnings
