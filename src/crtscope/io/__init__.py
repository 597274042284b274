"""Frame input/output."""
