"""Command-line interface for Turn Sarsah."""
