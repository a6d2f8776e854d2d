"""Core URL building for Sitestage."""
