"""Application layer - route editing use cases."""
