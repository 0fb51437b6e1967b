"""Open a terminal at the project directory of the focused IDE window."""

__version__ = "0.1.0"
