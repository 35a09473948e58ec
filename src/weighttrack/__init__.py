"""Weight and activity tracking with one-week weight forecasts."""

__version__ = "1.0.0"
