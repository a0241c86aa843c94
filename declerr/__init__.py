"""Read, check and render error classes declared with markers."""

__version__ = "0.1.0"

__all__ = ["attrs", "markers", "members", "model", "template", "validate"]