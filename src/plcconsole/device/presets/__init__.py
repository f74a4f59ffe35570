"""Built-in simulation presets, referenced as ``preset:<name>``."""
