"""GUI-agnostic core: plugin lifecycle engine and notification state."""
