"""Command line interface for shipmark."""
