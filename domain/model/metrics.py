# domain/model/metrics.py
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

from domain.service.risk import Ratios, compute_ratios


@dataclass(slots=True)
class MetricRecord:
    """Uma linha por par (telefone, transportadora)."""
    phone: str
    courier: str
    delivered: int = 0
    returned: int = 0
    cancelled: int = 0
    updated_at: Optional[datetime] = None
    id: Optional[int] = None
    # ---- taxas persistidas (recalculadas a cada escrita) ----
    complete_ratio: float = 0.0
    cancel_ratio: float = 0.0

    @property
    def ratios(self) -> Ratios:
        return compute_ratios(self.delivered, self.returned, self.cancelled)

    def to_dict(self) -> dict:
        d = asdict(self)
        r = self.ratios
        d.update(
            total_orders=r.total,
            completion_ratio=r.completion_ratio,
            cancel_ratio=r.cancel_ratio,
            risk_ratio=r.risk_ratio,
        )
        return d


@dataclass(slots=True)
class PhoneSummary:
    phone: str
    delivered: int
    returned: int
    cancelled: int
    updated_at: Optional[datetime]
    total_orders: int
    completion_ratio: float
    cancel_ratio: float
    risk_ratio: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class ProviderBreakdown:
    courier: str
    customers: int
    delivered: int
    returned: int
    cancelled: int
    updated_at: Optional[datetime]
    total_orders: int
    completion_ratio: float
    cancel_ratio: float
    risk_ratio: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class GlobalSummary:
    customers: int
    delivered: int
    returned: int
    cancelled: int
    total_orders: int
    completion_ratio: float
    cancel_ratio: float
    risk_ratio: float

    def to_dict(self) -> dict:
        return asdict(self)
