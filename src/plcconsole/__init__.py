"""plcconsole — interactive operator console for a network-attached controller."""

__version__ = "0.1.0"
