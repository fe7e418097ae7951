from __future__ import annotations

import os
from pathlib import Path

# Resolve repo root relative to this file
REPO_ROOT = Path(__file__).resolve().parents[2]

# Try to load .env
try:
    from dotenv import load_dotenv

    load_dotenv(REPO_ROOT / ".env", override=True)
except ImportError:
    pass

# LLM Config
# --- LLM Provider and Model Selection ---
# To add a new LLM provider:
# 1. Add the provider name to ALLOWED_PROVIDERS.
# 2. Add an 'elif' block below for the new provider to set its default model.
# 3. Define the API key environment variable name for the new provider.
# 4. Register the adapter in llm/factory.py.

ALLOWED_PROVIDERS = {"together", "openai", "anthropic", "dummy"}
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "together")

if LLM_PROVIDER not in ALLOWED_PROVIDERS:
    raise ValueError(
        f"Invalid LLM_PROVIDER: {LLM_PROVIDER}. Must be one of {sorted(ALLOWED_PROVIDERS)}"
    )

TOGETHER_API_KEY_ENV = "TOGETHER_API_KEY"
HELICONE_API_KEY_ENV = "HELICONE_API_KEY"
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"

# Together is reached through the Helicone observability gateway
HELICONE_BASE_URL = os.getenv("HELICONE_BASE_URL", "https://together.helicone.ai/v1")

if LLM_PROVIDER == "together":
    LLM_MODEL_NAME = os.getenv(
        "TOGETHER_MODEL_NAME", "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo"
    )
elif LLM_PROVIDER == "openai":
    LLM_MODEL_NAME = os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini")
elif LLM_PROVIDER == "anthropic":
    LLM_MODEL_NAME = os.getenv("ANTHROPIC_MODEL_NAME", "claude-sonnet-4-5")
else:  # LLM_PROVIDER == "dummy"
    LLM_MODEL_NAME = "dummy-model"

LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1000"))

# Source fetching / normalization
FETCH_TIMEOUT_S = float(os.getenv("FETCH_TIMEOUT_S", "3.0"))
MAX_CONTENT_CHARS = int(os.getenv("MAX_CONTENT_CHARS", "20000"))

# Wall-clock ceiling for a whole /api/getAnswer request, streaming included
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "45"))
