"""PT-Gen: media description generator for catalog sites."""

__version__ = "0.1.0"
