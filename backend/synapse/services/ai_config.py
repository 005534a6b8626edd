"""Runtime AI config override.

Allows switching AI_CHAT_PROVIDER without a restart. The override lives in
memory only and falls back to the environment on restart.
"""

from synapse.config import settings

PROVIDERS = {
    "openai": "OpenAI-compatible (OpenRouter)",
    "anthropic": "Anthropic Claude",
    "ollama": "Ollama (local)",
}

_override_provider: str | None = None


def get_current_provider() -> str:
    """Return the effective provider (override or env)."""
    if _override_provider is not None:
        return _override_provider
    return settings.ai_chat_provider


def set_provider(provider: str) -> bool:
    """Set the runtime provider override. Returns False for unknown providers."""
    global _override_provider
    if provider.lower() not in PROVIDERS:
        return False
    _override_provider = provider.lower()
    return True


def clear_override() -> None:
    """Clear override, revert to env."""
    global _override_provider
    _override_provider = None
