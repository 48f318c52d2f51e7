"""polywiki: a streaming visual dictionary for the terminal."""

__version__ = "0.3.0"
