#!/usr/bin/env python3
"""
Worker Service for the daily close report
Runs the day close scheduler on a fixed daily time
"""

import asyncio
import logging
import time

import schedule

from .config import Settings
from .dashboard import PacingDashboard
from .ai_client import GeminiClient
from .scheduler import DayCloseScheduler

logger = logging.getLogger(__name__)


class WorkerService:
    """Worker service wrapping the day close scheduler"""

    def __init__(self, settings: Settings = None, store=None):
        self.settings = settings or Settings.from_environment()
        store = store if store is not None else self.settings.build_store()
        dashboard = PacingDashboard(
            store,
            ai_client=GeminiClient.from_settings(self.settings),
            legacy_team=self.settings.legacy_team,
        )
        self.scheduler = DayCloseScheduler(dashboard, self.settings.teams, self.settings.day_close_time)
        logger.info("Worker service initialized")

    def run_day_close(self):
        """Run the day close job and log its outcome"""
        result = asyncio.run(self.scheduler.run_daily_job())
        if result['status'] == 'success':
            for team, report in result['report']['teams'].items():
                logger.info(f"Day close {team}: {report['total_successes']} successes, "
                            f"{report['current_achievement']:.1f}% of daily goal, pacing {report['pacing']}")
        elif result['status'] == 'error':
            logger.error(f"Day close failed: {result['message']}")
        else:
            logger.info(f"Day close skipped: {result['message']}")
        return result


def main():
    """Main worker loop"""
    settings = Settings.from_environment()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO),
                        format='%(asctime)s - %(levelname)s - %(message)s')
    logger.info("Starting day close worker")

    worker = WorkerService(settings)
    schedule_time = settings.day_close_time.strftime('%H:%M')
    schedule.every().day.at(schedule_time).do(worker.run_day_close)
    logger.info(f"Day close scheduled at {schedule_time}")

    while True:
        try:
            schedule.run_pending()
            time.sleep(60)

        except KeyboardInterrupt:
            logger.info("Worker service shutting down...")
            break
        except Exception as e:
            logger.error(f"Worker loop error: {str(e)}")
            time.sleep(60)


if __name__ == "__main__":
    main()
