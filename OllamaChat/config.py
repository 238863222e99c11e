"""
OllamaChat Configuration Module

All configurable settings are centralized here.
Environment variables take precedence over defaults.
"""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


# ==============================================================================
# Debug Settings
# ==============================================================================
@dataclass
class DebugConfig:
    enabled: bool = field(default_factory=lambda: _env_bool("DEBUG_MODE"))
    websocket_host: str = "localhost"
    websocket_port: int = field(default_factory=lambda: int(os.getenv("DEBUG_WEBSOCKET_PORT", "8765")))


# ==============================================================================
# Bot Settings
# ==============================================================================
@dataclass
class BotConfig:
    command_prefix: str = field(default_factory=lambda: os.getenv("COMMAND_PREFIX", "~-"))
    platform: str = "discord"
    max_reply_length: int = 1900  # Discord message limit with some headroom


# ==============================================================================
# Ollama Backend Settings
# ==============================================================================
@dataclass
class OllamaConfig:
    endpoint: str = field(default_factory=lambda: os.getenv("OLLAMA_ENDPOINT", "http://localhost:11434"))
    connect_timeout: float = field(default_factory=lambda: float(os.getenv("OLLAMA_CONNECT_TIMEOUT", "10")))
    request_timeout: float = field(default_factory=lambda: float(os.getenv("OLLAMA_REQUEST_TIMEOUT", "120")))

    def validate(self) -> None:
        """Validate backend configuration."""
        if not self.endpoint.startswith(("http://", "https://")):
            raise ValueError(f"OLLAMA_ENDPOINT must be an http(s) URL, got '{self.endpoint}'.")
        if self.connect_timeout <= 0 or self.request_timeout <= 0:
            raise ValueError("Ollama timeouts must be positive.")


# ==============================================================================
# Chat Settings
# ==============================================================================
@dataclass
class ChatConfig:
    enabled: bool = field(default_factory=lambda: _env_bool("ENABLE_CHAT"))
    too_long_threshold: int = field(default_factory=lambda: int(os.getenv("TOO_LONG_THRESHOLD", "100")))
    model_name: str = field(default_factory=lambda: os.getenv("CHAT_MODEL_NAME", ""))

    # Group messages starting with this prefix address the bot even without a mention
    call_prefix: str = field(default_factory=lambda: os.getenv("CHAT_CALL_PREFIX", "@Koishi"))
    locale: str = field(default_factory=lambda: os.getenv("CHAT_LOCALE", "zh-CN"))

    def validate(self) -> None:
        """Validate chat configuration. Only checked when chat is enabled."""
        if not self.enabled:
            return
        if not self.model_name:
            raise ValueError("CHAT_MODEL_NAME is required when ENABLE_CHAT is true.")
        if self.too_long_threshold <= 0:
            raise ValueError(f"TOO_LONG_THRESHOLD must be positive, got {self.too_long_threshold}.")


# ==============================================================================
# Singleton Config Instances
# ==============================================================================
debug = DebugConfig()
bot = BotConfig()
ollama = OllamaConfig()
chat = ChatConfig()


def validate_all():
    """Validate all configurations."""
    ollama.validate()
    chat.validate()
