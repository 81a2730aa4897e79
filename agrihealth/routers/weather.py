from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..advice import Weather, weather_tips
from ..security import get_current_user

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/tips", response_model=schemas.WeatherTips)
def get_weather_tips(
    temp: float,
    temp_min: Optional[float] = Query(None, alias="tempMin"),
    humidity: Optional[float] = None,
    wind_speed: Optional[float] = Query(None, alias="windSpeed"),
    main: str = "Clear",
    forecast: Optional[List[str]] = Query(None),
):
    weather = Weather(temp=temp, temp_min=temp_min, humidity=humidity, wind_speed=wind_speed, main=main)
    return schemas.WeatherTips(**weather_tips(weather, forecast or []))
