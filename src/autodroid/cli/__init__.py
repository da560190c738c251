"""autodroid command-line interface."""
