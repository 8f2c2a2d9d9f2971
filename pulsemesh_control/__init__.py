"""PulseMesh Control - restart and status API for the PulseMesh plugin."""

__version__ = "1.0.0"
