"""Front-desk visitor check-in/check-out register."""

__version__ = "1.0.0"
