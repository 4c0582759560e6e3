"""KP/DCC route calculator for pipeline and cable survey QA."""

__version__ = "0.1.0"
