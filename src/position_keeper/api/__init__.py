"""HTTP API for Position Keeper."""
