"""Read-only passes over a design tree: walking, token extraction, component detection."""
