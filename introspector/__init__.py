"""Introspector — PlantUML diagrams from annotations in source comments."""

__version__ = "0.1.0"
