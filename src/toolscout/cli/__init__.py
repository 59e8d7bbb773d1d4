"""Command-line interface for toolscout."""
