from __future__ import annotations

from typing import Any, Literal

APP_NAME = "ollama-code"
PROJECT_CONFIG_NAME = ".ollama-code.json"

Scope = Literal["global", "project"]

DEFAULT_CONFIG: dict[str, Any] = {
    # Ollama settings
    "ollama_base_url": "http://localhost:11434",
    "ollama_model": "codellama",
    # UI settings
    "theme": "dark",
    "verbose": False,
    # Tool settings
    "allowed_tools": [],  # signatures (wildcards allowed) that skip the permission prompt
    "ignore_patterns": ["node_modules", ".git", "node_modules/**", ".git/**"],
    "max_tokens": 4096,
}
