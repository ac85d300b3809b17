"""CLI command implementations for pagewright."""
