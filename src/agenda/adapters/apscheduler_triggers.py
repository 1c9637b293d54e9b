"""APScheduler adapter - one-shot date jobs as reminder triggers."""

import logging
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from agenda.core.errors import SchedulingError
from agenda.ports.notifier import ReminderNotifier
from agenda.ports.trigger_service import ReminderPayload

logger = logging.getLogger(__name__)


class APSchedulerTriggerService:
    """
    Trigger service backed by an APScheduler scheduler.

    Implements TriggerService protocol. Each reminder is a date-triggered
    job whose id is the trigger key; when it fires, the payload is handed
    to the notifier.
    """

    def __init__(
        self,
        notifier: ReminderNotifier,
        scheduler: BaseScheduler | None = None,
        timezone: str | None = None,
        misfire_grace_time: int = 60,
    ):
        self.notifier = notifier
        if scheduler is None:
            scheduler = BackgroundScheduler(timezone=timezone) if timezone else BackgroundScheduler()
        self.scheduler = scheduler
        self.misfire_grace_time = misfire_grace_time

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def shutdown(self, wait: bool = False) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Reminder scheduler stopped")

    def schedule(self, key: str, trigger_at: datetime, payload: ReminderPayload) -> None:
        try:
            self.scheduler.add_job(
                self._fire,
                DateTrigger(run_date=trigger_at),
                args=[payload],
                id=key,
                name=payload.title,
                replace_existing=True,
                misfire_grace_time=self.misfire_grace_time,
            )
        except Exception as e:
            raise SchedulingError(f"Could not schedule {key}: {e}") from e

    def cancel(self, keys: list[str]) -> None:
        for key in keys:
            try:
                self.scheduler.remove_job(key)
            except JobLookupError:
                pass

    def pending_keys(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]

    def _fire(self, payload: ReminderPayload) -> None:
        try:
            self.notifier.notify(payload)
        except Exception as e:
            logger.error(f"Failed to deliver reminder for {payload.title!r}: {e}")
