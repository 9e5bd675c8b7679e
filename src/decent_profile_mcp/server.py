"""Main MCP server entry point.

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

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .catalog import PresetCatalog, get_catalog
from .errors import ProfileError, UnknownPresetName
from .profile_validator import ProfileValidator
from .tools import (
    initialize_tools,
    list_presets_tool,
    get_preset_tool,
    analyze_preset_tool,
    analyze_profile_tool,
    validate_profile_tool,
    ProfileTextInput,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("Decent Espresso Profile Server")

# Global instances
_catalog: Optional[PresetCatalog] = None
_validator: Optional[ProfileValidator] = None


def _ensure_initialized() -> None:
    """Ensure server is initialized."""
    global _catalog, _validator
    if _catalog is None or _validator is None:
        # Initialize on first use
        _catalog = get_catalog()
        _validator = ProfileValidator()
        initialize_tools(_catalog, _validator)


# Register tools
@mcp.tool()
def list_presets() -> List[Dict[str, Any]]:
    """List all advanced presets (name and title), sorted by title."""
    _ensure_initialized()
    return list_presets_tool()


@mcp.tool()
def get_preset(name: str) -> Dict[str, Any]:
    """Get a preset's title, notes and raw advanced-shot step text by name."""
    _ensure_initialized()
    return get_preset_tool(name)


@mcp.tool()
def analyze_preset(name: str) -> Dict[str, Any]:
    """Trace a preset's temperature, pressure and flow over time.

    Each trace is a list of line segments [x1, y1, x2, y2] with x in
    seconds. Pressure and flow are only traced while the pump drives them.
    """
    _ensure_initialized()
    return analyze_preset_tool(name)


@mcp.tool()
def analyze_profile(input_data: ProfileTextInput) -> Dict[str, Any]:
    """Trace a profile document supplied as text (not from the catalog)."""
    _ensure_initialized()
    return analyze_profile_tool(input_data)


@mcp.tool()
def validate_profile(profile_text: str) -> Dict[str, Any]:
    """Validate a profile document and report errors and lint warnings."""
    _ensure_initialized()
    return validate_profile_tool(profile_text)


# Register resources
@mcp.resource("decent://presets")
def presets_resource() -> str:
    """Get the preset list as JSON."""
    _ensure_initialized()
    return json.dumps(list_presets_tool(), indent=2)


@mcp.resource("decent://preset/{name}")
def get_preset_resource(name: str) -> str:
    """Get a preset and its analysis as a resource."""
    _ensure_initialized()
    try:
        preset = _catalog.get(name)
        analysis = _catalog.analyze(name)
    except UnknownPresetName as e:
        return f"Error: {e.message}"
    except ProfileError as e:
        return f"Error: {e}"

    data = preset.model_dump()
    data["analysis"] = analysis.model_dump(mode="json")
    return json.dumps(data, indent=2)


@mcp.resource("decent://format")
def profile_format() -> str:
    """Get a reference for the profile document format."""
    return """# Decent Espresso Profile Format

Profiles are Tcl-style documents: a sequence of `key value` commands
separated by whitespace. Newlines are ordinary whitespace.

## Values

- **Numbers**: unsigned, `9`, `9.`, `9.0` or `.9`. Integers are read as floats.
- **Booleans**: `0` or `1`.
- **Strings**: a single word (`Decent`) or a brace-quoted string
  (`{Pressure Up}`). Braces nest: `{a {b} c}` is the string `a {b} c`.
- **Tags**: fixed words such as `fast`, `smooth`, `flow`, `pressure`.

## Profile commands

- `profile_title {...}`: display title (required)
- `profile_notes {...}`: free text notes (required)
- `settings_profile_type settings_2c`: marks an advanced profile. Only
  advanced profiles are listed in the catalog.
- `advanced_shot {{step} {step} ...}`: the step sequence (required)
- `author`, `beverage_type`, `espresso_temperature`, `maximum_flow`, and
  other machine settings are read but not used for analysis.

Unknown commands are kept and ignored.

## Step properties

Each step is a brace group of `key value` pairs:

```
{exit_if 1 flow 8 volume 100 transition fast exit_flow_under 0
 temperature 90 name preinfusion pressure 1 sensor coffee pump flow
 exit_type pressure_over exit_flow_over 6 exit_pressure_over 1.5
 exit_pressure_under 0 seconds 25}
```

- `seconds`: nominal duration (required)
- `transition`: `fast` (jump then hold) or `smooth` (ramp) (required)
- `pump`: `flow` or `pressure`, the channel the pump drives (required)
- `flow`, `pressure`, `temperature`: targets
- `sensor`: `coffee` or `water`
- `exit_if`: `1` enables an early exit described by `exit_type`
  (`pressure_under`, `pressure_over`, `flow_under`, `flow_over`) and the
  matching `exit_*` threshold
- `name`, `volume`, `weight`, `max_flow_or_pressure`,
  `max_flow_or_pressure_range`

If a property appears twice in one step only the first is used.

## Analysis

Analysis turns a step sequence into line segments for temperature,
pressure and flow. Temperature is always traced. Pressure and flow are
traced only in steps whose pump drives them; when the pump switches, the
channel that is no longer driven drops to zero. After a step that exits
on a flow threshold, the next flow step starts from that threshold."""


# Register prompts
@mcp.prompt()
def explain_preset(name: str, focus: Optional[str] = None) -> List[Dict[str, Any]]:
    """Prompt template for explaining how a preset shapes a shot."""
    messages = []

    system_context = """You are an expert on Decent Espresso advanced profiles.

Read a profile step by step:
- Which channel the pump drives (flow or pressure) and its target
- Whether the step ramps (smooth) or jumps (fast) to the target
- How long the step lasts and what can make it exit early
- How temperature changes across the shot

Use the analyze_preset tool to get the traced segments and relate each
phase (pre-infusion, rise, hold, decline) to how the shot will taste."""

    messages.append({
        "role": "system",
        "content": {
            "type": "text",
            "text": system_context,
        },
    })

    prompt_parts = [f"Explain the preset {name}"]

    if focus:
        focus_lower = focus.lower()
        if "temp" in focus_lower:
            prompt_parts.append("focusing on its temperature changes")
        elif any(word in focus_lower for word in ["pressure", "bar"]):
            prompt_parts.append("focusing on its pressure curve")
        elif "flow" in focus_lower:
            prompt_parts.append("focusing on its flow curve")
        else:
            prompt_parts.append(f"focusing on: {focus}")

    prompt_text = " ".join(prompt_parts) + "."
    prompt_text += "\n\nCover:"
    prompt_text += "\n- Each step, in order, with its duration and target"
    prompt_text += "\n- Where the pump switches between flow and pressure"
    prompt_text += "\n- Early exit conditions"
    prompt_text += "\n- The total nominal shot time"

    messages.append({
        "role": "user",
        "content": {
            "type": "text",
            "text": prompt_text,
        },
    })

    return messages


def main():
    """Main entry point for running the server."""
    # stdout carries the stdio transport
    logging.basicConfig(
        level=os.getenv("FASTMCP_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger.info("Starting Decent profile MCP server over stdio")
    mcp.run("stdio")


if __name__ == "__main__":
    main()
