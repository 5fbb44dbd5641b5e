"""Sensor modules hosted by the rvr_color package."""
