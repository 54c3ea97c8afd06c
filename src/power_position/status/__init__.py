"""Optional HTTP status endpoint."""
