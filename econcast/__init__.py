"""econcast: time-weighted Brier scoring and leaderboards for economic forecasts."""

__version__ = "0.1.0"
