from __future__ import annotations

from typing import Any

import structlog

from application.service.courier_registry import CourierRegistry
from config.providers import (
    SETTINGS_OPTION_KEY, ProviderSettings, enabled_providers, merge_provider_settings,
    sanitize_provider_settings,
)
from domain.errors import ValidationError
from ports.persistence import SettingsRepositoryPort

logger = structlog.get_logger(__name__, use_case="manage_provider_settings")


class ManageProviderSettings:
    def __init__(self, settings_repo: SettingsRepositoryPort, registry: CourierRegistry) -> None:
        self.settings_repo = settings_repo
        self.registry = registry

    def load(self) -> ProviderSettings:
        return merge_provider_settings(self.settings_repo.get_option(SETTINGS_OPTION_KEY))

    def save(self, raw: Any) -> ProviderSettings:
        clean = sanitize_provider_settings(raw)
        self.settings_repo.set_option(SETTINGS_OPTION_KEY, clean)
        self.registry.set_provider_settings(clean)
        logger.info("settings.saved", enabled=enabled_providers(clean))
        return clean

    def toggle(self, slug: str, enabled: bool) -> ProviderSettings:
        current = self.load()
        if slug not in current:
            raise ValidationError(f"unknown provider: {slug!r}")
        current[slug]["enabled"] = enabled
        return self.save(current)
