"""Eato: food-truck and event marketplace backend."""

__version__ = "1.0.0"
