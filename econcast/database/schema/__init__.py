from .base import Base
from .forecasting import AppUser, Forecast, ForecastHistory, Question

__all__ = [
    "Base",
    "Question",
    "Forecast",
    "ForecastHistory",
    "AppUser",
]
