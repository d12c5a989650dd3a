"""Command-line interface for the violin tuner."""

# Import CLI entry point for easier access
from .main import main as cli_main

__all__ = ["cli_main"]
