"""World Radio: internet radio player service backed by the radio-browser directory."""

__version__ = "0.1.0"
