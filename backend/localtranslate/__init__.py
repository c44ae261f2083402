"""Local LLM web page translation proxy and client."""

__version__ = "0.1.0"
