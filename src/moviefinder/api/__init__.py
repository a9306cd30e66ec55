"""HTTP API for MovieFinder."""
