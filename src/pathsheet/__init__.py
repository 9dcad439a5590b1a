"""Pathsheet - Pathfinder Second Edition character sheet rules engine."""

__version__ = "0.1.0"
