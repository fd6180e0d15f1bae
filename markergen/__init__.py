"""markergen — marker-driven source code generation."""

__version__ = "0.1.0"
