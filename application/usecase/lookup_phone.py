from domain.service.risk import format_percentage, require_phone
from ports.persistence import MetricsRepositoryPort


class LookupPhone:
    def __init__(self, metrics_repo: MetricsRepositoryPort) -> None:
        self.metrics_repo = metrics_repo

    def execute(self, phone: str) -> dict:
        phone = require_phone(phone)
        summary = self.metrics_repo.get_by_phone(phone)
        return {
            "phone": phone,
            "summary": summary.to_dict() if summary else None,
            "risk": format_percentage(summary.risk_ratio, 2) if summary else None,
            "providers": [r.to_dict() for r in self.metrics_repo.get_by_phone_per_provider(phone)],
        }
