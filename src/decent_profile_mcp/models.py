"""Data models for shot profiles, steps and analyzed traces.

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

from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import MissingRequiredProp


class TransitionType(Enum):
    """How a channel reaches its target within a step."""

    FAST = "fast"
    SMOOTH = "smooth"


class SensorType(Enum):
    """Which temperature sensor a step regulates against."""

    COFFEE = "coffee"
    WATER = "water"


class PumpType(Enum):
    """Which channel the pump drives during a step."""

    FLOW = "flow"
    PRESSURE = "pressure"


class ExitType(Enum):
    """Early-exit condition of a step."""

    PRESSURE_UNDER = "pressure_under"
    PRESSURE_OVER = "pressure_over"
    FLOW_UNDER = "flow_under"
    FLOW_OVER = "flow_over"


class BeverageType(Enum):
    CALIBRATE = "calibrate"
    CLEANING = "cleaning"
    ESPRESSO = "espresso"
    FILTER = "filter"
    MANUAL = "manual"
    POUROVER = "pourover"
    TEA_PORTAFILTER = "tea_portafilter"


class ProfileType(Enum):
    """Value of ``settings_profile_type``; ``settings_2c`` is an advanced profile."""

    SETTINGS_1 = "settings_1"
    SETTINGS_2 = "settings_2"
    SETTINGS_2A = "settings_2a"
    SETTINGS_2B = "settings_2b"
    SETTINGS_2C = "settings_2c"
    SETTINGS_2C2 = "settings_2c2"


ADVANCED_PROFILE_TYPE = ProfileType.SETTINGS_2C


class PropKey(Enum):
    """Keys understood inside an advanced-shot step."""

    EXIT_IF = "exit_if"
    FLOW = "flow"
    VOLUME = "volume"
    MAX_FLOW_OR_PRESSURE_RANGE = "max_flow_or_pressure_range"
    TRANSITION = "transition"
    EXIT_FLOW_UNDER = "exit_flow_under"
    TEMPERATURE = "temperature"
    NAME = "name"
    PRESSURE = "pressure"
    SENSOR = "sensor"
    PUMP = "pump"
    EXIT_TYPE = "exit_type"
    EXIT_FLOW_OVER = "exit_flow_over"
    EXIT_PRESSURE_OVER = "exit_pressure_over"
    MAX_FLOW_OR_PRESSURE = "max_flow_or_pressure"
    EXIT_PRESSURE_UNDER = "exit_pressure_under"
    SECONDS = "seconds"
    WEIGHT = "weight"


class CommandKey(Enum):
    """Top-level keys understood in a profile document."""

    ADVANCED_SHOT = "advanced_shot"
    AUTHOR = "author"
    BEVERAGE_TYPE = "beverage_type"
    ESPRESSO_DECLINE_TIME = "espresso_decline_time"
    ESPRESSO_HOLD_TIME = "espresso_hold_time"
    ESPRESSO_PRESSURE = "espresso_pressure"
    ESPRESSO_TEMPERATURE = "espresso_temperature"
    ESPRESSO_TEMPERATURE_0 = "espresso_temperature_0"
    ESPRESSO_TEMPERATURE_1 = "espresso_temperature_1"
    ESPRESSO_TEMPERATURE_2 = "espresso_temperature_2"
    ESPRESSO_TEMPERATURE_3 = "espresso_temperature_3"
    ESPRESSO_TEMPERATURE_STEPS_ENABLED = "espresso_temperature_steps_enabled"
    FINAL_DESIRED_SHOT_VOLUME = "final_desired_shot_volume"
    FINAL_DESIRED_SHOT_VOLUME_ADVANCED = "final_desired_shot_volume_advanced"
    FINAL_DESIRED_SHOT_VOLUME_ADVANCED_COUNT_START = "final_desired_shot_volume_advanced_count_start"
    FINAL_DESIRED_SHOT_WEIGHT = "final_desired_shot_weight"
    FINAL_DESIRED_SHOT_WEIGHT_ADVANCED = "final_desired_shot_weight_advanced"
    FLOW_PROFILE_DECLINE = "flow_profile_decline"
    FLOW_PROFILE_DECLINE_TIME = "flow_profile_decline_time"
    FLOW_PROFILE_HOLD = "flow_profile_hold"
    FLOW_PROFILE_HOLD_TIME = "flow_profile_hold_time"
    FLOW_PROFILE_MINIMUM_PRESSURE = "flow_profile_minimum_pressure"
    FLOW_PROFILE_PREINFUSION = "flow_profile_preinfusion"
    FLOW_PROFILE_PREINFUSION_TIME = "flow_profile_preinfusion_time"
    MAXIMUM_FLOW = "maximum_flow"
    MAXIMUM_FLOW_RANGE = "maximum_flow_range"
    MAXIMUM_FLOW_RANGE_ADVANCED = "maximum_flow_range_advanced"
    MAXIMUM_FLOW_RANGE_DEFAULT = "maximum_flow_range_default"
    MAXIMUM_PRESSURE = "maximum_pressure"
    MAXIMUM_PRESSURE_RANGE = "maximum_pressure_range"
    MAXIMUM_PRESSURE_RANGE_ADVANCED = "maximum_pressure_range_advanced"
    MAXIMUM_PRESSURE_RANGE_DEFAULT = "maximum_pressure_range_default"
    PREINFUSION_FLOW_RATE = "preinfusion_flow_rate"
    PREINFUSION_GUARANTEE = "preinfusion_guarantee"
    PREINFUSION_STOP_PRESSURE = "preinfusion_stop_pressure"
    PREINFUSION_TIME = "preinfusion_time"
    PRESSURE_END = "pressure_end"
    PROFILE_HIDE = "profile_hide"
    PROFILE_LANGUAGE = "profile_language"
    PROFILE_NOTES = "profile_notes"
    PROFILE_TITLE = "profile_title"
    SETTINGS_PROFILE_TYPE = "settings_profile_type"
    TANK_DESIRED_WATER_TEMPERATURE = "tank_desired_water_temperature"
    WATER_TEMPERATURE = "water_temperature"
    BEAN_BRAND = "bean_brand"
    BEAN_TYPE = "bean_type"
    GRINDER_DOSE_WEIGHT = "grinder_dose_weight"
    GRINDER_MODEL = "grinder_model"
    GRINDER_SETTING = "grinder_setting"


Value = Union[
    bool,
    float,
    str,
    TransitionType,
    SensorType,
    PumpType,
    ExitType,
    BeverageType,
    ProfileType,
]


class Prop(BaseModel):
    """A recognized key/value pair inside a step."""

    model_config = ConfigDict(frozen=True)

    key: PropKey = Field(description="Step property key")
    value: Value = Field(description="Typed property value")


class UnknownProp(BaseModel):
    """A well-formed step property whose key is not recognized."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Raw property key")
    value: str = Field(description="Property value as text")


StepProp = Union[Prop, UnknownProp]


class Step(BaseModel):
    """One timed phase of a shot, as an ordered list of properties.

    Lookups resolve to the first matching property. Behaviour for a key
    repeated within one step is otherwise undefined, so later duplicates
    are kept in ``props`` but never consulted.
    """

    model_config = ConfigDict(frozen=True)

    props: List[StepProp] = Field(default_factory=list, description="Properties in source order")

    def get(self, key: PropKey) -> Optional[Prop]:
        """Get the first property with the given key.

        Args:
            key: Property key

        Returns:
            The first matching Prop, or None
        """
        for prop in self.props:
            if isinstance(prop, Prop) and prop.key is key:
                return prop
        return None

    def value(self, key: PropKey, default: Any = None) -> Any:
        prop = self.get(key)
        return default if prop is None else prop.value

    def _required(self, key: PropKey) -> Any:
        prop = self.get(key)
        if prop is None:
            raise MissingRequiredProp(key.value, where=self._describe())
        return prop.value

    def seconds(self) -> float:
        """Get the nominal step duration.

        Raises:
            MissingRequiredProp: If the step has no ``seconds``
        """
        return self._required(PropKey.SECONDS)

    def transition(self) -> TransitionType:
        """Get the step transition.

        Raises:
            MissingRequiredProp: If the step has no ``transition``
        """
        return self._required(PropKey.TRANSITION)

    def pump(self) -> PumpType:
        """Get the pump mode.

        Raises:
            MissingRequiredProp: If the step has no ``pump``
        """
        return self._required(PropKey.PUMP)

    def exit_flow(self) -> Optional[float]:
        """Get the flow threshold of a flow-based early exit.

        Returns:
            The threshold when ``exit_if`` is set, ``exit_type`` is a flow
            exit and the matching threshold is present; otherwise None.
            Pressure exits never produce a value.
        """
        if self.value(PropKey.EXIT_IF) is not True:
            return None
        exit_type = self.value(PropKey.EXIT_TYPE)
        if exit_type is ExitType.FLOW_OVER:
            return self.value(PropKey.EXIT_FLOW_OVER)
        if exit_type is ExitType.FLOW_UNDER:
            return self.value(PropKey.EXIT_FLOW_UNDER)
        return None

    def unknown_props(self) -> List[UnknownProp]:
        return [prop for prop in self.props if isinstance(prop, UnknownProp)]

    def _describe(self) -> str:
        name = self.value(PropKey.NAME)
        return f"step '{name}'" if name else "step"


class Command(BaseModel):
    """A recognized top-level key/value pair of a profile document."""

    model_config = ConfigDict(frozen=True)

    key: CommandKey = Field(description="Command key")
    value: Value = Field(description="Typed command value")


class UnknownCommand(BaseModel):
    """A well-formed top-level command whose key is not recognized."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Raw command key")
    value: str = Field(description="Command value as text")


ProfileCommand = Union[Command, UnknownCommand]


class Preset(BaseModel):
    """A catalog entry derived from an advanced profile document."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Source document name, used as the preset identifier")
    title: str = Field(description="Profile title")
    notes: str = Field(description="Profile notes")
    advanced_shot: str = Field(description="Raw step-sequence text, newline terminated")


Segment = Tuple[float, float, float, float]


class AnalyzedProfile(BaseModel):
    """Line segments in (time, value) space for each traced channel."""

    model_config = ConfigDict(frozen=True)

    temperature: Tuple[Segment, ...] = Field(default=(), description="Temperature segments (x1, y1, x2, y2)")
    pressure: Tuple[Segment, ...] = Field(default=(), description="Pressure segments (x1, y1, x2, y2)")
    flow: Tuple[Segment, ...] = Field(default=(), description="Flow segments (x1, y1, x2, y2)")
    elapsed_time: float = Field(default=0.0, description="Total nominal duration in seconds")
