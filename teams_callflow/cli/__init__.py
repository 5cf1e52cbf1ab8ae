"""Command line interface for teams_callflow."""
