from dataclasses import dataclass

import structlog

from adapters.courier.mock_adapter import MockCourierAdapter
from adapters.repository.sql_metrics_repository import SqlMetricsRepository
from application.service.courier_registry import CourierRegistry
from application.usecase.check_phone import CheckPhone
from application.usecase.dashboard_overview import DashboardOverview
from application.usecase.import_metrics import DeleteMetrics, ImportMetrics
from application.usecase.lifecycle import Lifecycle
from application.usecase.lookup_phone import LookupPhone
from application.usecase.manage_provider_settings import ManageProviderSettings
from application.usecase.refresh_courier_metrics import RefreshCourierMetrics

logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    """Dependências montadas uma única vez no boot e repassadas explicitamente."""
    repository: SqlMetricsRepository
    registry: CourierRegistry

    def refresh(self) -> RefreshCourierMetrics:
        return RefreshCourierMetrics(self.registry, self.repository, self.repository)

    def check(self) -> CheckPhone:
        return CheckPhone(self.repository, self.registry)

    def lookup(self) -> LookupPhone:
        return LookupPhone(self.repository)

    def dashboard(self) -> DashboardOverview:
        return DashboardOverview(self.repository)

    def importer(self) -> ImportMetrics:
        return ImportMetrics(self.repository)

    def deleter(self) -> DeleteMetrics:
        return DeleteMetrics(self.repository)

    def provider_settings(self) -> ManageProviderSettings:
        return ManageProviderSettings(self.repository, self.registry)

    def lifecycle(self) -> Lifecycle:
        return Lifecycle(self.repository, self.repository)


def build_context(db_url: str) -> AppContext:
    logger.info("boot.build_context")

    repository = SqlMetricsRepository(db_url)
    registry = CourierRegistry()
    registry.register(MockCourierAdapter.SLUG, MockCourierAdapter())

    context = AppContext(repository=repository, registry=registry)
    registry.set_provider_settings(context.provider_settings().load())
    return context
