from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import structlog

from application.service.courier_registry import CourierRegistry
from config.providers import SETTINGS_OPTION_KEY, merge_provider_settings
from domain.errors import StorageError, ValidationError
from domain.service.risk import require_phone
from ports.persistence import MetricsRepositoryPort, SettingsRepositoryPort

logger = structlog.get_logger(__name__, use_case="refresh_courier_metrics")


@dataclass
class RefreshReport:
    phone: str
    count: int = 0
    providers: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "phone": self.phone,
            "count": self.count,
            "providers": list(self.providers),
            "errors": dict(self.errors),
        }


class RefreshCourierMetrics:
    """
    Consulta os provedores habilitados e grava (substitui) os contadores
    de cada telefone.
    """

    def __init__(
        self,
        registry: CourierRegistry,
        metrics_repo: MetricsRepositoryPort,
        settings_repo: SettingsRepositoryPort,
    ) -> None:
        self.registry = registry
        self.metrics_repo = metrics_repo
        self.settings_repo = settings_repo

    # ------------------------------------------------------------------ #
    #  API pública                                                       #
    # ------------------------------------------------------------------ #
    def refresh_phone(self, phone: str, providers: Iterable[str] = ()) -> RefreshReport:
        phone = require_phone(phone)
        log = logger.bind(phone=phone)
        report = RefreshReport(phone=phone)

        outcome = self.registry.fetch(phone, providers)
        report.errors = {slug: err.message for slug, err in outcome.errors.items()}

        for slug, payload in outcome.results.items():
            try:
                self.metrics_repo.upsert(
                    phone=payload.phone or phone,
                    courier=payload.courier or slug,
                    delivered=payload.delivered,
                    returned=payload.returned,
                    cancelled=payload.cancelled,
                    updated_at=payload.updated_at,
                )
            except ValidationError as exc:
                log.warning("refresh.payload.invalid", provider=slug, error=str(exc))
                report.errors[slug] = str(exc)
                continue
            report.providers.append(slug)
            report.count += 1

        log.info("refresh.phone.done", count=report.count, failed=sorted(report.errors))
        return report

    def execute(self) -> List[RefreshReport]:
        """Rotina agendada: atualiza todos os telefones já conhecidos."""
        settings = merge_provider_settings(self.settings_repo.get_option(SETTINGS_OPTION_KEY))
        self.registry.set_provider_settings(settings)

        phones = self.metrics_repo.list_phones()
        logger.info("refresh.start", phones=len(phones))

        reports: List[RefreshReport] = []
        for phone in phones:
            try:
                reports.append(self.refresh_phone(phone))
            except StorageError:
                logger.exception("refresh.phone.error", phone=phone)

        logger.info("refresh.finish", refreshed=len(reports), phones=len(phones))
        return reports
