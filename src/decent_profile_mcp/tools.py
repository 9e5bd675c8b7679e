"""MCP tools for browsing and analyzing espresso shot profiles.

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

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .analyzer import analyze
from .catalog import PresetCatalog
from .errors import ProfileError, UnknownPresetName
from .models import AnalyzedProfile, PropKey, PumpType, Step
from .parser import parse_steps
from .profile import Profile
from .profile_validator import ProfileValidationError, ProfileValidator

logger = logging.getLogger(__name__)


class ProfileTextInput(BaseModel):
    """Input model for analyzing a profile document that is not in the catalog."""

    profile_text: str = Field(
        description="Full profile document text (Tcl key/value format with an 'advanced_shot' step list)"
    )
    name: Optional[str] = Field(default=None, description="Optional label used in messages")


# Global instances (will be initialized in server.py)
_catalog: Optional[PresetCatalog] = None
_validator: Optional[ProfileValidator] = None


def initialize_tools(catalog: PresetCatalog, validator: ProfileValidator) -> None:
    """Initialize tools with the preset catalog and validator.

    Args:
        catalog: The preset catalog
        validator: The profile validator instance
    """
    global _catalog, _validator
    _catalog = catalog
    _validator = validator


def _ensure_initialized() -> None:
    """Ensure tools are initialized."""
    if _catalog is None or _validator is None:
        raise RuntimeError("Tools not initialized. Call initialize_tools() first.")


def _format_validation_errors(errors: List[str]) -> str:
    """Format validation errors into a clear, actionable message.

    Args:
        errors: List of error messages

    Returns:
        Formatted error message with helpful hints
    """
    error_lines = ["Profile validation failed. Please fix the following issues:"]
    error_lines.append("")

    for i, error in enumerate(errors, 1):
        error_lines.append(f"{i}. {error}")

    error_lines.append("")
    error_lines.append("Common issues and fixes:")
    error_lines.append("  - Missing commands: a profile needs 'profile_title', 'profile_notes' and 'advanced_shot'")
    error_lines.append("  - Profile type: only 'settings_profile_type settings_2c' (advanced) profiles can be analyzed")
    error_lines.append("  - Step format: each step is '{key value ...}' and needs 'seconds', 'transition' and 'pump'")
    error_lines.append("  - Text values with spaces must be wrapped in braces, e.g. 'name {Pressure Up}'")

    return "\n".join(error_lines)


def _summarize_steps(steps: List[Step]) -> List[Dict[str, Any]]:
    summaries = []
    for index, step in enumerate(steps, 1):
        pump = step.pump()
        target_key = PropKey.PRESSURE if pump is PumpType.PRESSURE else PropKey.FLOW
        summary = {
            "index": index,
            "name": step.value(PropKey.NAME),
            "seconds": step.seconds(),
            "pump": pump.value,
            "transition": step.transition().value,
            "target": step.value(target_key),
            "temperature": step.value(PropKey.TEMPERATURE),
        }
        exit_type = step.value(PropKey.EXIT_TYPE)
        if step.value(PropKey.EXIT_IF) is True and exit_type is not None:
            summary["exit_type"] = exit_type.value
        summaries.append(summary)
    return summaries


def _analysis_response(steps: List[Step], analysis: AnalyzedProfile) -> Dict[str, Any]:
    response = analysis.model_dump(mode="json")
    response["steps"] = _summarize_steps(steps)
    return response


def list_presets_tool() -> List[Dict[str, Any]]:
    """List all presets in the catalog.

    Returns:
        List of preset dictionaries with name and title, sorted by title
    """
    _ensure_initialized()

    return [{"name": preset.name, "title": preset.title} for preset in _catalog.list_presets()]


def get_preset_tool(name: str) -> Dict[str, Any]:
    """Get a preset's title, notes and raw step text.

    Args:
        name: Preset name

    Returns:
        Dictionary with the preset fields
    """
    _ensure_initialized()

    try:
        preset = _catalog.get(name)
    except UnknownPresetName as e:
        raise ValueError(f"Failed to get preset: {e.message}") from e

    return preset.model_dump()


def analyze_preset_tool(name: str) -> Dict[str, Any]:
    """Analyze a preset into temperature, pressure and flow traces.

    Args:
        name: Preset name

    Returns:
        Dictionary with the traced segments, elapsed time and a step summary
    """
    _ensure_initialized()

    try:
        preset = _catalog.get(name)
        steps = parse_steps(preset.advanced_shot)
        analysis = analyze(steps)
    except ProfileError as e:
        logger.warning(f"Analysis of preset {name} failed: {e.message}")
        raise ValueError(f"Failed to analyze preset: {e}") from e

    response = _analysis_response(steps, analysis)
    response["name"] = preset.name
    response["title"] = preset.title
    return response


def analyze_profile_tool(input_data: ProfileTextInput) -> Dict[str, Any]:
    """Analyze a profile document supplied as text.

    Args:
        input_data: Profile document input

    Returns:
        Dictionary with the traced segments, elapsed time, step summary and
        any lint warnings
    """
    _ensure_initialized()

    label = input_data.name or "profile"
    try:
        _validator.validate_and_raise(input_data.profile_text)
    except ProfileValidationError as e:
        raise ValueError(_format_validation_errors(e.errors)) from e

    warnings = _validator.lint(input_data.profile_text)

    try:
        profile = Profile.from_text(input_data.profile_text)
        steps = profile.steps()
        analysis = analyze(steps)
    except ProfileError as e:
        raise ValueError(f"Failed to analyze {label}: {e}") from e

    response = _analysis_response(steps, analysis)
    response["title"] = profile.title()
    if warnings:
        response["warnings"] = warnings
    return response


def validate_profile_tool(profile_text: str) -> Dict[str, Any]:
    """Validate a profile document.

    Args:
        profile_text: Profile document text

    Returns:
        Dictionary with validation results and any warnings
    """
    _ensure_initialized()

    is_valid, errors = _validator.validate(profile_text)
    warnings = _validator.lint(profile_text)

    return {
        "valid": is_valid,
        "errors": errors,
        "warnings": warnings,
        "message": "Profile is valid" if is_valid else f"Profile has {len(errors)} validation error(s)",
    }
