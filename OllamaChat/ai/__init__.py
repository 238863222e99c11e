"""AI module for OllamaChat - Ollama backend client."""

from .ollama import FailureCause, OllamaClient, OllamaError

__all__ = ["FailureCause", "OllamaClient", "OllamaError"]
