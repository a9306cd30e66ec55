"""MovieFinder: movie discovery over the TMDB catalog."""

__version__ = "0.1.0"
