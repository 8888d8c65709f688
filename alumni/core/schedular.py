import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from alumni.core.config import settings
from alumni.core.database import SessionLocal
from alumni.services.membership import MembershipService

logger = logging.getLogger(__name__)


def release_expired_suspensions():
    """
    Scheduled task that lifts suspensions whose end date has passed.
    Permission checks already treat them as lapsed; this persists it.
    """
    db = SessionLocal()
    try:
        released = MembershipService(db).release_expired_suspensions()
        logger.info(f"Suspension sweep completed. Released {released} memberships.")
    except Exception as e:
        logger.error(f"Error during suspension sweep: {e}")
        raise
    finally:
        db.close()


def start_scheduler():
    """
    Initialize and start the APScheduler for membership housekeeping.
    """
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        release_expired_suspensions,
        trigger=CronTrigger(minute=f"*/{settings.suspension_sweep_minutes}"),
        id="release_expired_suspensions",
        name="Lift expired community suspensions",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        f"Scheduler started. Suspension sweep every {settings.suspension_sweep_minutes} minutes."
    )

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """
    Gracefully shutdown the scheduler.
    """
    if scheduler:
        scheduler.shutdown()
        logger.info("Scheduler shut down.")
