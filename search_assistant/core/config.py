"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. load_settings() snapshots them into a read-only Settings object at
process start; components receive that object explicitly.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or "").strip() or default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Comma-separated env var -> tuple of lowercase, non-empty items."""
    raw = os.getenv(name, "")
    items = tuple(p.strip().lower() for p in raw.split(",") if p.strip())
    return items or default


# Completion backend: "anthropic" (Messages API over httpx) or "openai" (SDK)
COMPLETION_BACKEND: str = _env("COMPLETION_BACKEND", "anthropic").lower()
COMPLETION_MAX_TOKENS: int = int(_env("COMPLETION_MAX_TOKENS", "1024"))

# Anthropic (CLAUDE_API_KEY kept for older .env files)
ANTHROPIC_API_KEY: str = _env("ANTHROPIC_API_KEY") or _env("CLAUDE_API_KEY")
ANTHROPIC_BASE_URL: str = _env("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
ANTHROPIC_MODEL: str = _env("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
ANTHROPIC_VERSION: str = _env("ANTHROPIC_VERSION", "2023-06-01")

# OpenAI (alternative completion backend)
OPENAI_API_KEY: str = _env("OPENAI_API_KEY")
OPENAI_BASE_URL: str = _env("OPENAI_BASE_URL")
OPENAI_LLM_MODEL: str = _env("OPENAI_LLM_MODEL", "gpt-4o-mini")

# Search backend: "perplexity" (structured /search), "perplexity_chat"
# (sonar chat completions, free text), or "duckduckgo" (ddgs, no key)
SEARCH_BACKEND: str = _env("SEARCH_BACKEND", "perplexity").lower()
PERPLEXITY_API_KEY: str = _env("PERPLEXITY_API_KEY")
PERPLEXITY_BASE_URL: str = _env("PERPLEXITY_BASE_URL", "https://api.perplexity.ai")
PERPLEXITY_MODEL: str = _env("PERPLEXITY_MODEL", "sonar-pro")
PERPLEXITY_CHAT_MODEL: str = _env("PERPLEXITY_CHAT_MODEL", "sonar")
PERPLEXITY_SOURCE_FILTER: str = _env("PERPLEXITY_SOURCE_FILTER", "reliable_sources_only")
SEARCH_FOCUS: str = _env("SEARCH_FOCUS", "technical")
SEARCH_TEMPERATURE: float = float(_env("SEARCH_TEMPERATURE", "0.2"))
SEARCH_MAX_RESULTS: int = int(_env("SEARCH_MAX_RESULTS", "5"))

# API timeouts (seconds)
LLM_API_TIMEOUT: float = float(_env("LLM_API_TIMEOUT", "60"))
SEARCH_API_TIMEOUT: float = float(_env("SEARCH_API_TIMEOUT", "30"))

# Keyword stems. Plan steps containing one of these need a search; inbound
# messages containing one of the direct-search keywords skip the planner.
PLAN_SEARCH_KEYWORDS: tuple[str, ...] = _env_list(
    "PLAN_SEARCH_KEYWORDS",
    ("поиск", "найти", "информац", "search", "find", "information"),
)
DIRECT_SEARCH_KEYWORDS: tuple[str, ...] = _env_list(
    "DIRECT_SEARCH_KEYWORDS",
    ("найди", "поиск", "узнай", "search for", "look up"),
)

LOG_LEVEL: str = _env("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    """Read-only configuration snapshot shared by every request."""

    completion_backend: str = COMPLETION_BACKEND
    completion_max_tokens: int = COMPLETION_MAX_TOKENS
    anthropic_api_key: str = ANTHROPIC_API_KEY
    anthropic_base_url: str = ANTHROPIC_BASE_URL
    anthropic_model: str = ANTHROPIC_MODEL
    anthropic_version: str = ANTHROPIC_VERSION
    openai_api_key: str = OPENAI_API_KEY
    openai_base_url: str = OPENAI_BASE_URL
    openai_model: str = OPENAI_LLM_MODEL
    search_backend: str = SEARCH_BACKEND
    perplexity_api_key: str = PERPLEXITY_API_KEY
    perplexity_base_url: str = PERPLEXITY_BASE_URL
    perplexity_model: str = PERPLEXITY_MODEL
    perplexity_chat_model: str = PERPLEXITY_CHAT_MODEL
    perplexity_source_filter: str = PERPLEXITY_SOURCE_FILTER
    search_focus: str = SEARCH_FOCUS
    search_temperature: float = SEARCH_TEMPERATURE
    search_max_results: int = SEARCH_MAX_RESULTS
    llm_timeout: float = LLM_API_TIMEOUT
    search_timeout: float = SEARCH_API_TIMEOUT
    plan_search_keywords: tuple[str, ...] = PLAN_SEARCH_KEYWORDS
    direct_search_keywords: tuple[str, ...] = DIRECT_SEARCH_KEYWORDS
    log_level: str = LOG_LEVEL


def load_settings() -> Settings:
    return Settings()
