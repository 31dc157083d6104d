"""Core abstractions: item contracts, configuration, resilience and metrics."""
