"""Trace synthesis for advanced-shot step sequences.

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

Each step contributes line segments in (time, value) space. Temperature
is always traced. Pressure and flow are traced only while the pump
drives that channel; when the pump hands over, the channel that stops
being driven drops to zero at its last x position.
"""

import logging
from typing import List, Optional, Sequence

from .models import AnalyzedProfile, Prop, PropKey, PumpType, Segment, Step, TransitionType

logger = logging.getLogger(__name__)


class _Trace:
    """Segments emitted so far for one channel."""

    def __init__(self) -> None:
        self.segments: List[Segment] = []

    @property
    def last(self) -> Optional[Segment]:
        return self.segments[-1] if self.segments else None

    @property
    def last_value(self) -> Optional[float]:
        last = self.last
        return None if last is None else last[3]

    def add(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.segments.append((x1, y1, x2, y2))

    def drop_to_zero(self) -> None:
        """Close the trace with a vertical segment down to zero at its last x."""
        last = self.last
        if last is not None:
            x, y = last[2], last[3]
            self.add(x, y, x, 0.0)

    def hold(self, start: float, end: float, prev: float, value: float) -> None:
        """Jump from ``prev`` to ``value`` at ``start``, then hold until ``end``."""
        self.add(start, prev, start, value)
        self.add(start, value, end, value)


def _drive(
    trace: _Trace,
    start: float,
    end: float,
    value: float,
    transition: TransitionType,
    correction: Optional[float] = None,
) -> None:
    prev = trace.last_value
    if prev is None:
        trace.hold(start, end, 0.0, value)
        return

    if correction is not None:
        trace.add(start, prev, start, correction)
        prev = correction

    if transition is TransitionType.SMOOTH:
        trace.add(start, prev, end, value)
    else:
        trace.hold(start, end, prev, value)


def analyze(steps: Sequence[Step]) -> AnalyzedProfile:
    """Convert a step sequence into channel traces.

    Args:
        steps: Steps in execution order

    Returns:
        AnalyzedProfile with temperature, pressure and flow segments and
        the total nominal duration

    Raises:
        MissingRequiredProp: If a step lacks ``seconds``, ``transition``
            or ``pump``
    """
    temperature = _Trace()
    pressure = _Trace()
    flow = _Trace()

    elapsed_time = 0.0
    prev_pump: Optional[PumpType] = None
    prev_exit_flow: Optional[float] = None

    for step in steps:
        duration = step.seconds()
        transition = step.transition()
        pump = step.pump()
        end = elapsed_time + duration

        for prop in step.props:
            if not isinstance(prop, Prop):
                continue

            if prop.key is PropKey.TEMPERATURE:
                prev = temperature.last_value
                if prev is None:
                    temperature.add(elapsed_time, prop.value, end, prop.value)
                else:
                    temperature.hold(elapsed_time, end, prev, prop.value)

            elif prop.key is PropKey.PRESSURE and pump is PumpType.PRESSURE:
                if prev_pump is PumpType.FLOW:
                    flow.drop_to_zero()
                _drive(pressure, elapsed_time, end, prop.value, transition)

            elif prop.key is PropKey.FLOW and pump is PumpType.FLOW:
                if prev_pump is PumpType.PRESSURE:
                    pressure.drop_to_zero()
                _drive(flow, elapsed_time, end, prop.value, transition, correction=prev_exit_flow)

        elapsed_time = end
        prev_pump = pump
        prev_exit_flow = step.exit_flow()

    logger.debug(
        f"Analyzed {len(steps)} steps: {elapsed_time}s, "
        f"{len(temperature.segments)}/{len(pressure.segments)}/{len(flow.segments)} segments"
    )
    return AnalyzedProfile(
        temperature=tuple(temperature.segments),
        pressure=tuple(pressure.segments),
        flow=tuple(flow.segments),
        elapsed_time=elapsed_time,
    )
