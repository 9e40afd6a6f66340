"""Wayland wire codec, protocol XML model, socket connection, and a CPU-side asset and scene toolkit."""

__version__ = "0.1.0"