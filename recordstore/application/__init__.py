"""Application layer: record DTOs and repository interfaces (ports)."""
