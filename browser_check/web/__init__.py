"""HTTP status server."""
