import time

import schedule
import structlog

from application.usecase.refresh_courier_metrics import RefreshCourierMetrics
from config.settings import REFRESH_INTERVAL_HOURS
from ports.scheduler import SchedulerPort

logger = structlog.get_logger(__name__)

class CronScheduler(SchedulerPort):
    def __init__(
        self,
        job: RefreshCourierMetrics,
        interval_hours: int = REFRESH_INTERVAL_HOURS,
        poll_seconds: float = 30,
    ):
        self.job = job
        self.interval_hours = interval_hours
        self.poll_seconds = poll_seconds
        self.scheduler = schedule.Scheduler()
        self._running = False

    def start(self):
        # Executa a cada `interval_hours` (padrão: 12h)
        logger.info("cron.start", interval_hours=self.interval_hours)
        self.scheduler.every(self.interval_hours).hours.do(self.job.execute)
        self._running = True
        while self._running:
            self.scheduler.run_pending()
            time.sleep(self.poll_seconds)
        self.scheduler.clear()
        logger.info("cron.stop")

    def stop(self):
        self._running = False
