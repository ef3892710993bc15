"""Telemetry access and scheduling."""
