"""Size, complexity, DIA metrics and UML relations for Java sources on GitHub."""

__version__ = "0.1.0"
