# -*- coding: utf-8 -*-
"""
Data point mapping for water quality sensors.

Translates the generic {dp_id: value} map reported by the device into a
SensorReading. Keys not listed in SENSOR_DATA_POINTS are ignored.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, NamedTuple

_LOGGER = logging.getLogger(__name__)


class DataPoint(NamedTuple):
    """How one data point maps onto a SensorReading attribute."""
    attribute: str
    scale: int
    kind: type


# dp_id -> (attribute, divisor, result type)
SENSOR_DATA_POINTS: Dict[str, DataPoint] = {
    "106": DataPoint("acidity", 100, float),
    "131": DataPoint("redox_potential", 1, int),
    "111": DataPoint("dissolved_solids", 1, int),
    "8": DataPoint("temperature", 10, float),
}


@dataclass
class SensorReading:
    """Latest values reported by the sensor.

    Attributes:
        acidity: pH value
        redox_potential: Oxidation-reduction potential (mV)
        dissolved_solids: Total dissolved solids (ppm)
        temperature: Water temperature (degrees C)
    """
    acidity: float = 0.0
    redox_potential: int = 0
    dissolved_solids: int = 0
    temperature: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_backend_payload(self) -> Dict[str, Any]:
        """Body posted to the backend's submit endpoint."""
        return {
            "ph": round(self.acidity, 2),
            "orp": self.redox_potential,
            "tds": self.dissolved_solids,
            "temp": round(self.temperature, 1),
            "turbidity": 0,
        }


def map_data_points(dps: Dict[str, Any], reading: SensorReading) -> SensorReading:
    """Update reading in place from a data point map.

    Attributes whose data point is absent from dps keep their value.

    Args:
        dps: Data points from a status response
        reading: Reading to update

    Returns:
        The same reading object
    """
    for dp_id, point in SENSOR_DATA_POINTS.items():
        if dp_id not in dps:
            continue

        value = dps[dp_id]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            _LOGGER.debug("Ignoring non-numeric value %r for DP %s", value, dp_id)
            continue
        if isinstance(value, float) and not math.isfinite(value):
            _LOGGER.debug("Ignoring non-finite value %r for DP %s", value, dp_id)
            continue

        try:
            if point.kind is int:
                scaled = int(value) // point.scale
            else:
                scaled = value / point.scale
        except OverflowError:
            _LOGGER.debug("Ignoring out of range value for DP %s", dp_id)
            continue
        setattr(reading, point.attribute, scaled)

    return reading
