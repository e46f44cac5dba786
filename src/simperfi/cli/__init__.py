"""Command line interface for simperfi."""
