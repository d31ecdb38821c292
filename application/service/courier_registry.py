from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import structlog

from application.dto.courier_dto import CourierMetricsDTO
from config.providers import ProviderSettings, copy_settings, is_supported
from domain.errors import AdapterError, ValidationError
from domain.service.risk import normalize_phone
from ports.courier_client import CourierAdapterPort

logger = structlog.get_logger(__name__, service="courier_registry")


@dataclass
class FetchOutcome:
    results: Dict[str, CourierMetricsDTO] = field(default_factory=dict)
    errors: Dict[str, AdapterError] = field(default_factory=dict)


class CourierRegistry:
    """
    Mapa slug -> adaptador, filtrado pelas configurações dos provedores.
    A falha de um provedor é registrada e não interrompe os demais.
    """

    def __init__(self, settings: Optional[ProviderSettings] = None) -> None:
        self._adapters: Dict[str, CourierAdapterPort] = {}
        self._settings: ProviderSettings = copy_settings(settings or {})

    def register(self, slug: str, adapter: CourierAdapterPort) -> None:
        self._adapters[slug] = adapter
        logger.debug("registry.register", provider=slug)

    def has_adapter(self, slug: str) -> bool:
        return slug in self._adapters

    def set_provider_settings(self, settings: ProviderSettings) -> None:
        self._settings = copy_settings(settings)

    def get_provider_settings(self, slug: str) -> dict:
        return dict(self._settings.get(slug, {}))

    def is_enabled(self, slug: str) -> bool:
        return bool(self.get_provider_settings(slug).get("enabled"))

    @staticmethod
    def require_supported(providers: Iterable[str] = ()) -> List[str]:
        wanted = [slug for slug in providers if slug]
        unknown = sorted({slug for slug in wanted if not is_supported(slug)})
        if unknown:
            raise ValidationError(f"unknown provider: {', '.join(unknown)}", code="invalid_provider")
        return wanted

    def resolve(self, providers: Iterable[str] = ()) -> Dict[str, CourierAdapterPort]:
        wanted = set(self.require_supported(providers))
        return {
            slug: adapter
            for slug, adapter in self._adapters.items()
            if self.is_enabled(slug) and (not wanted or slug in wanted)
        }

    def fetch(self, phone: str, providers: Iterable[str] = ()) -> FetchOutcome:
        phone = normalize_phone(phone)
        outcome = FetchOutcome()

        for slug, adapter in self.resolve(providers).items():
            log = logger.bind(provider=slug, phone=phone)
            try:
                payload = adapter.fetch(phone)
            except AdapterError as exc:
                log.exception("registry.fetch.adapter_error")
                outcome.errors[slug] = exc
                continue
            except Exception as exc:
                log.exception("registry.fetch.unexpected_error")
                outcome.errors[slug] = AdapterError(slug, str(exc) or exc.__class__.__name__)
                continue

            if payload is None:
                log.info("registry.fetch.empty")
                continue
            outcome.results[slug] = payload
            log.info("registry.fetch.success")

        return outcome
