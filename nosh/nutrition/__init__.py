"""Serving resolution and nutrient aggregation."""
