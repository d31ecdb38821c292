from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from config.providers import is_supported
from domain.errors import ValidationError
from domain.model.metrics import MetricRecord
from domain.service.risk import coerce_counter, require_phone
from ports.persistence import MetricsRepositoryPort

logger = structlog.get_logger(__name__, use_case="import_metrics")


class ImportMetrics:
    """Importação manual de contadores (substitui o registro existente)."""

    def __init__(self, metrics_repo: MetricsRepositoryPort) -> None:
        self.metrics_repo = metrics_repo

    def execute(
        self,
        phone: str,
        courier: str,
        delivered: Any = 0,
        returned: Any = 0,
        cancelled: Any = 0,
    ) -> MetricRecord:
        phone = require_phone(phone)
        courier = (courier or "").strip().lower()
        if not is_supported(courier):
            raise ValidationError(f"unknown provider: {courier!r}")

        record = self.metrics_repo.upsert(
            phone=phone,
            courier=courier,
            delivered=coerce_counter("delivered", delivered),
            returned=coerce_counter("returned", returned),
            cancelled=coerce_counter("cancelled", cancelled),
            updated_at=datetime.now(timezone.utc),
        )
        logger.info("import.success", id=record.id, phone=phone, courier=courier)
        return record


class DeleteMetrics:
    def __init__(self, metrics_repo: MetricsRepositoryPort) -> None:
        self.metrics_repo = metrics_repo

    def execute(self, record_id: int) -> bool:
        deleted = self.metrics_repo.delete(record_id)
        logger.info("delete.done", id=record_id, deleted=deleted)
        return deleted
