"""
Terminal Intelligence - per-language Ollama commanders with shell aliases.
"""

__version__ = "0.1.0"
