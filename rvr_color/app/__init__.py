"""Command-line host for the color sensor controller."""
