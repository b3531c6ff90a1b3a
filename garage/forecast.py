"""Daily summaries of a 5-day / 3-hour weather forecast."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List

from dateutil.parser import isoparse

COLD_LIMIT = 10
HOT_LIMIT = 30


@dataclass
class DayForecast:
    """One day of forecast, reduced from its 3-hour entries."""

    date: date
    temp_min: float
    temp_max: float
    description: str
    icon: str
    weather_id: int

    @property
    def is_rainy(self) -> bool:
        # Thunderstorm, drizzle, rain and snow condition groups
        return 200 <= self.weather_id < 600

    @property
    def is_cold(self) -> bool:
        return self.temp_min < COLD_LIMIT

    @property
    def is_hot(self) -> bool:
        return self.temp_max > HOT_LIMIT

    def highlights(self, rain: bool = True, cold: bool = True, hot: bool = True) -> List[str]:
        """Names of the enabled highlight conditions this day meets."""
        result = []
        if rain and self.is_rainy:
            result.append("rain")
        if cold and self.is_cold:
            result.append("cold")
        if hot and self.is_hot:
            result.append("hot")
        return result


def summarize_forecast(data: Dict[str, Any]) -> List[DayForecast]:
    """
    Bucket forecast entries by calendar day.

    Each day keeps the min and max temperature of its entries and the
    description, icon and condition id of its middle entry. Days are
    returned in the order they first appear.
    """
    if not data or not data.get("list"):
        return []

    buckets: Dict[str, Dict[str, list]] = {}
    for item in data["list"]:
        day = item["dt_txt"].split(" ")[0]
        bucket = buckets.setdefault(
            day, {"temps": [], "descriptions": [], "icons": [], "ids": []}
        )
        weather = item["weather"][0]
        bucket["temps"].append(item["main"]["temp"])
        bucket["descriptions"].append(weather["description"])
        bucket["icons"].append(weather["icon"])
        bucket["ids"].append(weather["id"])

    days = []
    for day, bucket in buckets.items():
        middle = len(bucket["icons"]) // 2
        days.append(
            DayForecast(
                date=isoparse(day).date(),
                temp_min=min(bucket["temps"]),
                temp_max=max(bucket["temps"]),
                description=bucket["descriptions"][middle],
                icon=bucket["icons"][middle],
                weather_id=bucket["ids"][middle],
            )
        )
    return days
