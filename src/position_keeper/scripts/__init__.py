"""Maintenance scripts for Position Keeper."""
