from __future__ import annotations

from typing import Iterable

import structlog

from application.service.courier_registry import CourierRegistry
from domain.service.risk import require_phone
from ports.persistence import MetricsRepositoryPort

logger = structlog.get_logger(__name__, use_case="check_phone")


class CheckPhone:
    """
    Resposta do endpoint público: resumo em cache quando houver dados,
    senão consulta ao vivo dos provedores (sem persistir).
    """

    def __init__(self, metrics_repo: MetricsRepositoryPort, registry: CourierRegistry) -> None:
        self.metrics_repo = metrics_repo
        self.registry = registry

    def execute(self, phone: str, providers: Iterable[str] = ()) -> dict:
        phone = require_phone(phone)
        providers = self.registry.require_supported(providers)
        log = logger.bind(phone=phone)

        summary = self.metrics_repo.get_by_phone(phone)
        if summary is not None:
            log.info("check.cached")
            data = summary.to_dict()
            data.update(providers={}, cached=True)
            return data

        outcome = self.registry.fetch(phone, providers)
        log.info("check.live", providers=sorted(outcome.results), failed=sorted(outcome.errors))
        return {
            "phone": phone,
            "providers": {slug: dto.to_dict() for slug, dto in outcome.results.items()},
            "errors": {slug: err.message for slug, err in outcome.errors.items()},
            "cached": False,
        }
