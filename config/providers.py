"""
Catálogo das transportadoras suportadas e regras de configuração.

Cada provedor declara campos tipados ('toggle', 'text', 'password', 'url')
com valor padrão. As configurações persistidas são sempre mescladas
com estes padrões antes do uso.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, List

SETTINGS_OPTION_KEY = "providers"

SUPPORTED_PROVIDERS: Dict[str, Dict[str, Any]] = {
    "mock": {
        "label": "Mock Provider",
        "description": "Synthetic data source for demos, QA and fallback testing.",
        "fields": {
            "enabled": {"type": "toggle", "label": "Enable Mock Provider", "default": True},
            "api_key": {"type": "text", "label": "API Key", "default": ""},
        },
    },
    "pathao": {
        "label": "Pathao",
        "description": "Connect to the Pathao Merchant API to pull delivery and return history.",
        "fields": {
            "enabled": {"type": "toggle", "label": "Enable Pathao Sync", "default": False},
            "client_id": {"type": "text", "label": "Client ID", "default": ""},
            "client_secret": {"type": "password", "label": "Client Secret", "default": ""},
            "username": {"type": "text", "label": "Username / Merchant ID", "default": ""},
            "password": {"type": "password", "label": "Password", "default": ""},
        },
    },
    "steadfast": {
        "label": "Steadfast",
        "description": "Integrate Steadfast courier performance metrics.",
        "fields": {
            "enabled": {"type": "toggle", "label": "Enable Steadfast Sync", "default": False},
            "api_key": {"type": "text", "label": "API Key", "default": ""},
            "api_secret": {"type": "password", "label": "API Secret", "default": ""},
            "base_url": {"type": "url", "label": "Base URL", "default": ""},
        },
    },
    "redx": {
        "label": "REDX",
        "description": "Connect REDX courier reports to enrich fraud scoring.",
        "fields": {
            "enabled": {"type": "toggle", "label": "Enable REDX Sync", "default": False},
            "api_key": {"type": "text", "label": "API Key", "default": ""},
            "api_secret": {"type": "password", "label": "API Secret", "default": ""},
            "warehouse_code": {"type": "text", "label": "Warehouse / Store Code", "default": ""},
        },
    },
}

ProviderSettings = Dict[str, Dict[str, Any]]


def is_supported(slug: str) -> bool:
    return slug in SUPPORTED_PROVIDERS


def provider_defaults() -> ProviderSettings:
    defaults: ProviderSettings = {}
    for slug, provider in SUPPORTED_PROVIDERS.items():
        defaults[slug] = {}
        for key, field in provider["fields"].items():
            if "default" in field:
                defaults[slug][key] = field["default"]
            else:
                defaults[slug][key] = False if field["type"] == "toggle" else ""
    return defaults


def merge_provider_settings(stored: Any) -> ProviderSettings:
    """Mescla o que foi salvo com os padrões; slugs e campos desconhecidos são ignorados."""
    output = provider_defaults()
    if not isinstance(stored, dict):
        return output

    for slug, fields in stored.items():
        if slug not in output or not isinstance(fields, dict):
            continue
        for key in output[slug]:
            if key in fields:
                output[slug][key] = fields[key]
    return output


def _clean_url(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    value = value.strip()
    return value if value.lower().startswith(("http://", "https://")) else ""


def sanitize_provider_settings(raw: Any) -> ProviderSettings:
    raw = raw if isinstance(raw, dict) else {}
    clean: ProviderSettings = {}

    for slug, provider in SUPPORTED_PROVIDERS.items():
        incoming = raw.get(slug) if isinstance(raw.get(slug), dict) else {}
        clean[slug] = {}
        for key, field in provider["fields"].items():
            value = incoming.get(key)
            if field["type"] == "toggle":
                clean[slug][key] = bool(value)
            elif field["type"] == "url":
                clean[slug][key] = _clean_url(value)
            else:
                clean[slug][key] = value.strip() if isinstance(value, str) else ""
    return clean


def enabled_providers(settings: ProviderSettings | None = None) -> List[str]:
    settings = provider_defaults() if settings is None else settings
    return [slug for slug, fields in settings.items() if fields.get("enabled")]


def copy_settings(settings: ProviderSettings) -> ProviderSettings:
    return copy.deepcopy(settings)
