"""HTTP API for the CV optimizer."""
