"""
Periodic sensor polling scheduler
"""
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging
import asyncio

from agro_monitor.database import settings
from agro_monitor.services.sensor_collector import run_collection

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler()

def poll_all_sensors():
    """Run one collection pass from the scheduler thread"""
    try:
        report = asyncio.run(run_collection())
        failed = [r for r in report.results if not r.success]
        logger.info(f"Sensor collection finished: {len(report.results)} sensors, {len(failed)} failed")
    except Exception as e:
        logger.error(f"Error in scheduled sensor collection: {str(e)}")

def start_scheduler():
    """Start the sensor polling scheduler unless polling is disabled"""
    interval = settings.sensor_poll_seconds
    if interval <= 0:
        logger.info("Sensor polling scheduler disabled (SENSOR_POLL_SECONDS <= 0)")
        return

    if not scheduler.running:
        scheduler.add_job(
            poll_all_sensors,
            IntervalTrigger(seconds=interval),
            id='sensor_collection',
            replace_existing=True,
            max_instances=1
        )
        scheduler.start()
        logger.info(f"Sensor polling scheduler started (interval: {interval} seconds)")

def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Sensor polling scheduler stopped")
