"""Runtime configuration, logging and path helpers."""
