"""Event Manager REST API and event store."""
