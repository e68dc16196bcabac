"""Shared utilities: telemetry (logging, tracing) and datetime helpers.

Used by domain, application, and infrastructure. No business logic.
"""
