"""Event Manager clients: remote (REST) and local-only."""
