"""
City Info Workflow

city-info-workflow:
    parallel(fetch-weather, calculate-travel-time, get-local-events) -> combine-data

The three lookups run concurrently against a "city-data" service from the
context. SimulatedCityData stands in for real weather/travel/events APIs.
"""

import asyncio
import logging
import random
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..core.context import CollaboratorContext
from ..workflows import WorkflowDefinition, create_step, create_workflow

logger = logging.getLogger(__name__)

CITY_DATA_SERVICE = "city-data"

Condition = Literal["sunny", "cloudy", "rainy"]

EVENT_TYPES = ["Concert", "Festival", "Market", "Exhibition", "Sports Game"]


class SimulatedCityData:
    """
    Random city data with artificial latency.

    Args:
        seed: Seed for reproducible data
        delays: Seconds to sleep per lookup ("weather", "travel", "events")
    """

    DEFAULT_DELAYS = {"weather": 1.0, "travel": 0.8, "events": 0.6}

    def __init__(self, seed: Optional[int] = None, delays: Optional[Dict[str, float]] = None):
        self._random = random.Random(seed)
        self.delays = dict(self.DEFAULT_DELAYS if delays is None else delays)

    async def _wait(self, lookup: str) -> None:
        delay = self.delays.get(lookup, 0.0)
        if delay > 0:
            await asyncio.sleep(delay)

    async def weather(self, city: str) -> dict:
        await self._wait("weather")
        return {
            "temperature": self._random.randint(10, 39),
            "condition": self._random.choice(["sunny", "cloudy", "rainy"]),
            "city": city,
        }

    async def travel(self, city: str) -> dict:
        await self._wait("travel")
        return {
            "travel_time": self._random.randint(1, 8),
            "distance": self._random.randint(50, 549),
            "city": city,
        }

    async def events(self, city: str) -> dict:
        await self._wait("events")
        return {
            "events": [self._random.choice(EVENT_TYPES) for _ in range(3)],
            "city": city,
        }


class CityQuery(BaseModel):
    city: str = Field(..., min_length=1, description="The city to get information about")


class WeatherReport(BaseModel):
    temperature: float
    condition: Condition
    city: str


class TravelEstimate(BaseModel):
    travel_time: float
    distance: float
    city: str


class LocalEvents(BaseModel):
    events: List[str]
    city: str


class CityReports(BaseModel):
    """Fan-in of the three lookups, keyed by step id."""

    weather: WeatherReport = Field(..., alias="fetch-weather")
    travel: TravelEstimate = Field(..., alias="calculate-travel-time")
    events: LocalEvents = Field(..., alias="get-local-events")


class CitySummary(BaseModel):
    city: str
    weather: str
    travel_info: str
    events: List[str]


class CityRecommendation(BaseModel):
    recommendation: str
    summary: CitySummary


async def _fetch_weather(data: CityQuery, context: CollaboratorContext) -> dict:
    return await context.get_service(CITY_DATA_SERVICE).weather(data.city)


async def _calculate_travel_time(data: CityQuery, context: CollaboratorContext) -> dict:
    return await context.get_service(CITY_DATA_SERVICE).travel(data.city)


async def _get_local_events(data: CityQuery, context: CollaboratorContext) -> dict:
    return await context.get_service(CITY_DATA_SERVICE).events(data.city)


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _combine(data: CityReports, context: CollaboratorContext) -> dict:
    weather, travel, events = data.weather, data.travel, data.events
    hours = _number(travel.travel_time)

    if weather.condition == "sunny" and travel.travel_time <= 4:
        recommendation = f"Perfect day trip! {weather.city} has sunny weather and is only {hours} hours away."
    elif weather.condition == "rainy":
        recommendation = (
            f"Consider indoor activities in {weather.city}. "
            f"It's rainy but there are {len(events.events)} events happening."
        )
    else:
        recommendation = (
            f"{weather.city} is {hours} hours away with {weather.condition} weather. Plan accordingly!"
        )

    return {
        "recommendation": recommendation,
        "summary": {
            "city": weather.city,
            "weather": f"{_number(weather.temperature)}°C, {weather.condition}",
            "travel_info": f"{_number(travel.distance)}km, {hours}h drive",
            "events": events.events,
        },
    }


fetch_weather_step = create_step(
    id="fetch-weather",
    description="Fetches weather data for a city",
    input_schema=CityQuery,
    output_schema=WeatherReport,
    execute=_fetch_weather,
)

calculate_travel_time_step = create_step(
    id="calculate-travel-time",
    description="Calculates travel time to a city",
    input_schema=CityQuery,
    output_schema=TravelEstimate,
    execute=_calculate_travel_time,
)

get_local_events_step = create_step(
    id="get-local-events",
    description="Gets local events for a city",
    input_schema=CityQuery,
    output_schema=LocalEvents,
    execute=_get_local_events,
)

combine_data_step = create_step(
    id="combine-data",
    description="Combines weather, travel, and events data",
    input_schema=CityReports,
    output_schema=CityRecommendation,
    execute=_combine,
)


def build_city_info_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="city-info-workflow",
            input_schema=CityQuery,
            output_schema=CityRecommendation,
            description="Looks up weather, travel time and events in parallel, then recommends",
        )
        .parallel([fetch_weather_step, calculate_travel_time_step, get_local_events_step])
        .then(combine_data_step)
        .commit()
    )
