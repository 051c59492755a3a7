"""Share cards for Strava activities."""

__version__ = "0.1.0"
