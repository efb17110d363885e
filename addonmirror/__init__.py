"""addon-mirror: GitHub releases aggregated into an addon repository."""

__version__ = "0.1.0"
