from typing import Iterable, List, Optional

from pydantic import BaseModel

from .catalog import DiseaseEntry

RAIN_CONDITIONS = ("Rain", "Thunderstorm", "Drizzle")

HOT_TEMP = 30
COLD_TEMP = 10
EXTREME_HEAT_TEMP = 35
FROST_TEMP = 2
WINDY_SPEED = 10  # km/h
HUMID_PCT = 70


def build_treatment_plan(disease: DiseaseEntry) -> List[str]:
    """Treatment steps for `disease`, adjusted by its catalog severity."""
    steps = list(disease.treatment_methods or [])
    if not steps:
        steps = ["Consult a local extension officer or veterinarian for treatment options."]
    sev = (disease.severity or '').lower()
    if sev == 'high':
        steps = ["Urgent: Act within 24–48 hours."] + steps + ["Increase monitoring frequency (daily) until stabilized."]
    elif sev == 'medium':
        steps = steps + ["Monitor twice per week and reassess in 7 days."]
    else:
        steps = steps + ["Monitor weekly; no drastic actions needed."]
    if getattr(disease, 'zoonotic', False):
        steps.append("Zoonotic risk: wear gloves and protective clothing when handling affected animals.")
    return steps


class Weather(BaseModel):
    temp: float
    temp_min: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    main: str = "Clear"


def _is_rain(condition: Optional[str]) -> bool:
    return condition in RAIN_CONDITIONS


def soil_condition(weather: Weather) -> str:
    if weather.main in ("Rain", "Thunderstorm"):
        return 'wet'
    if weather.humidity is not None and weather.humidity > HUMID_PCT:
        return 'moist'
    return 'dry'


def watering_tip(weather: Weather, rain_soon: bool) -> str:
    if _is_rain(weather.main):
        return 'Skip watering today as it is currently raining.'
    if rain_soon:
        return 'Consider skipping watering as rain is expected in the next 24 hours.'
    if weather.temp > HOT_TEMP:
        return 'Water early in the morning or late in the evening to minimize evaporation due to high temperatures.'
    return 'Good conditions for regular watering. Water deeply and infrequently to encourage deep root growth.'


def spraying_tip(weather: Weather, rain_soon: bool) -> str:
    if weather.wind_speed is not None and weather.wind_speed > WINDY_SPEED:
        return 'Avoid spraying due to high winds which can cause drift.'
    if _is_rain(weather.main) or rain_soon:
        return 'Avoid spraying as rain will wash away chemicals.'
    return 'Good conditions for spraying. Apply in early morning when winds are calm.'


def planting_tip(weather: Weather) -> str:
    if weather.temp < COLD_TEMP:
        return 'Too cold for planting most crops. Consider using cold frames or waiting for warmer weather.'
    if weather.temp > HOT_TEMP:
        return 'Plant in the evening to avoid heat stress. Provide shade for sensitive seedlings.'
    if soil_condition(weather) == 'wet':
        return 'Soil may be too wet for planting. Wait until soil dries out to avoid compaction.'
    return 'Good conditions for planting. Ensure proper seed depth and spacing.'


def harvesting_tip(weather: Weather, rain_soon: bool) -> str:
    if _is_rain(weather.main):
        return 'Delay harvesting until conditions are dry to prevent crop damage and disease.'
    if rain_soon:
        return 'Consider harvesting soon before rain arrives. Prioritize mature crops that could be damaged by moisture.'
    return 'Good conditions for harvesting. Harvest in the morning when temperatures are cooler.'


def general_tip(weather: Weather, storm_soon: bool) -> str:
    if weather.temp > EXTREME_HEAT_TEMP:
        return 'Extreme heat alert! Provide extra water for plants and shade for sensitive crops.'
    if weather.temp_min is not None and weather.temp_min < FROST_TEMP:
        return 'Frost risk! Protect sensitive plants with covers or bring potted plants indoors.'
    if storm_soon:
        return 'Storms expected! Secure any loose items and provide support for tall plants.'
    return 'Normal weather conditions. Continue regular agricultural activities.'


def weather_tips(weather: Weather, forecast: Iterable[str] = ()) -> dict:
    """Farming advice for current conditions and the next 24h forecast conditions."""
    forecast = list(forecast)
    rain_soon = any(_is_rain(f) for f in forecast)
    storm_soon = "Thunderstorm" in forecast
    return {
        "watering": watering_tip(weather, rain_soon),
        "spraying": spraying_tip(weather, rain_soon),
        "planting": planting_tip(weather),
        "harvesting": harvesting_tip(weather, rain_soon),
        "general": general_tip(weather, storm_soon),
    }
