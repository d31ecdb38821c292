from config.settings import DASHBOARD_LIMIT
from ports.persistence import MetricsRepositoryPort


class DashboardOverview:
    """Totais gerais, quebra por transportadora, maiores riscos e atividade recente."""

    def __init__(self, metrics_repo: MetricsRepositoryPort) -> None:
        self.metrics_repo = metrics_repo

    def execute(self, top_limit: int = DASHBOARD_LIMIT, recent_limit: int = DASHBOARD_LIMIT) -> dict:
        return {
            "summary": self.metrics_repo.get_summary().to_dict(),
            "providers": [b.to_dict() for b in self.metrics_repo.get_provider_breakdown()],
            "top_risk": [s.to_dict() for s in self.metrics_repo.get_top_risk(top_limit)],
            "recent": [r.to_dict() for r in self.metrics_repo.get_recent(recent_limit)],
        }
