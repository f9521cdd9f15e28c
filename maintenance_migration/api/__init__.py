"""HTTP status API for migration runs."""
