from datetime import datetime
from typing import Any, List, Optional

from domain.model.metrics import (
    GlobalSummary, MetricRecord, PhoneSummary, ProviderBreakdown,
)

class MetricsRepositoryPort:
    def create_tables(self) -> None:
        raise NotImplementedError

    def drop_tables(self) -> None:
        raise NotImplementedError

    def upsert(
        self,
        phone: str,
        courier: str,
        delivered: int,
        returned: int,
        cancelled: int,
        updated_at: Optional[datetime] = None,
    ) -> MetricRecord:
        """Insere ou substitui os contadores do par (telefone, transportadora)."""
        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[PhoneSummary]:
        raise NotImplementedError

    def get_by_phone_per_provider(self, phone: str) -> List[MetricRecord]:
        raise NotImplementedError

    def get_summary(self) -> GlobalSummary:
        raise NotImplementedError

    def get_provider_breakdown(self) -> List[ProviderBreakdown]:
        raise NotImplementedError

    def get_top_risk(self, limit: int = 5) -> List[PhoneSummary]:
        raise NotImplementedError

    def get_recent(self, limit: int = 5) -> List[MetricRecord]:
        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_phones(self) -> List[str]:
        raise NotImplementedError

class SettingsRepositoryPort:
    def get_option(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set_option(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete_option(self, key: str) -> None:
        raise NotImplementedError
