"""Weather impact scoring for outdoor games.

Conditions are reduced to a small number of impact points; the predictor
multiplies impact by ``weather_coefficient`` to get the points removed from
the predicted total. Indoor venues always score 0.
"""

from pydantic import BaseModel, ConfigDict, Field

# (threshold, impact) steps; every exceeded step adds its impact
WIND_STEPS = ((15.0, 0.5), (25.0, 1.0))
COLD_STEPS = ((20.0, 0.5), (10.0, 0.5))
HEAT_THRESHOLD = 95.0
HEAT_IMPACT = 0.3
PRECIPITATION_STEPS = ((30.0, 0.5), (60.0, 0.5))


class WeatherConditions(BaseModel):
    """Forecast or observed conditions at kickoff.

    Attributes:
        temperature: Degrees Fahrenheit
        wind_speed: Miles per hour
        precipitation: Chance of precipitation in percent (0-100)
        humidity: Relative humidity in percent
        indoor: True for domed or closed-roof venues
        description: Free-text summary from the feed
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    temperature: float = 72.0
    wind_speed: float = Field(default=0.0, ge=0)
    precipitation: float = Field(default=0.0, ge=0, le=100)
    humidity: float | None = Field(default=None, ge=0, le=100)
    indoor: bool = False
    description: str | None = None

    @classmethod
    def indoors(cls) -> "WeatherConditions":
        return cls(indoor=True, description="Indoor")


def weather_impact(conditions: WeatherConditions | None) -> float:
    """Impact points for a set of conditions.

    Example:
        >>> weather_impact(WeatherConditions(temperature=15, wind_speed=20))
        1.0
        >>> weather_impact(WeatherConditions.indoors())
        0.0
    """
    if conditions is None or conditions.indoor:
        return 0.0

    impact = 0.0
    for threshold, points in WIND_STEPS:
        if conditions.wind_speed > threshold:
            impact += points
    for threshold, points in COLD_STEPS:
        if conditions.temperature < threshold:
            impact += points
    if conditions.temperature > HEAT_THRESHOLD:
        impact += HEAT_IMPACT
    for threshold, points in PRECIPITATION_STEPS:
        if conditions.precipitation > threshold:
            impact += points

    return round(impact, 2)
