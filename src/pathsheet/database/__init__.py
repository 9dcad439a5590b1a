"""Persistence for character records."""
