"""Build call-flow diagrams from Microsoft Teams auto attendant and call queue configuration."""

__version__ = "0.1.0"
