import structlog

from config.providers import SETTINGS_OPTION_KEY, provider_defaults
from ports.persistence import MetricsRepositoryPort, SettingsRepositoryPort

logger = structlog.get_logger(__name__, use_case="lifecycle")


class Lifecycle:
    def __init__(self, metrics_repo: MetricsRepositoryPort, settings_repo: SettingsRepositoryPort) -> None:
        self.metrics_repo = metrics_repo
        self.settings_repo = settings_repo

    def install(self) -> None:
        self.metrics_repo.create_tables()
        if self.settings_repo.get_option(SETTINGS_OPTION_KEY) is None:
            self.settings_repo.set_option(SETTINGS_OPTION_KEY, provider_defaults())
        logger.info("install.done")

    def uninstall(self) -> None:
        self.settings_repo.delete_option(SETTINGS_OPTION_KEY)
        self.metrics_repo.drop_tables()
        logger.info("uninstall.done")
