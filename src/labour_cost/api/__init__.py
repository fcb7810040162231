"""HTTP API for the labour cost engine."""
