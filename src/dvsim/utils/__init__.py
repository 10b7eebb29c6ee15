"""File helpers shared by the config loader and the run backend."""
