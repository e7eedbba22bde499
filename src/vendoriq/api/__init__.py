"""HTTP API for the risk intelligence engine."""
