"""Command-line interface for playing and benchmarking dig-the-hole."""
