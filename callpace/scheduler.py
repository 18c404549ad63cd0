"""
Day Close Scheduler Module
Builds the end-of-shift pacing report once per day in a 10-minute window
"""

from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from .dashboard import PacingDashboard

WINDOW_MINUTES = 10


class DayCloseScheduler:
    """Schedules and executes the daily close report"""

    def __init__(self, dashboard: PacingDashboard, teams: List[str], scheduled_time: time = time(18, 5)):
        """
        Initialize scheduler

        Args:
            dashboard: Dashboard service used to build the report
            teams: Teams included in the report
            scheduled_time: Start of the run window
        """
        self.dashboard = dashboard
        self.teams = teams
        self.scheduled_time = scheduled_time
        self.last_run = None
        self.is_running = False

    def _window(self, current_time: datetime):
        start = current_time.replace(
            hour=self.scheduled_time.hour,
            minute=self.scheduled_time.minute,
            second=0,
            microsecond=0
        )
        return start, start + timedelta(minutes=WINDOW_MINUTES)

    def should_run_now(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check if the report should run now

        Args:
            current_time: Optional datetime for testing

        Returns:
            True if inside the window and not yet run today
        """
        if current_time is None:
            current_time = datetime.now()

        start_window, end_window = self._window(current_time)
        if not (start_window <= current_time <= end_window):
            return False

        if self.last_run and self.last_run.date() == current_time.date():
            return False

        return True

    async def generate_report(self, day: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Build the close report for every team

        Args:
            day: Day to report on (default: today)

        Returns:
            Report dict keyed by team
        """
        day = (day or datetime.now()).date()
        teams = {}
        for team in self.teams:
            view = self.dashboard.day_view(team, day, today=day)
            summary = view['summary']
            teams[team] = {
                'total_successes': summary['total_successes'],
                'total_activations': summary['total_activations'],
                'daily_goal': summary['daily_goal'],
                'current_achievement': summary['current_achievement'],
                'prediction_feedback': view['prediction_feedback'],
                'monthly_progress': view['monthly_progress'],
                'pacing': {name: track['status'] for name, track in view['pacing'].items()},
            }
        return {
            'report_date': day.isoformat(),
            'generated_at': datetime.now().isoformat(),
            'teams': teams,
        }

    async def run_daily_job(self) -> Dict[str, Any]:
        """
        Execute the day close job

        Returns:
            Job result with status
        """
        if self.is_running:
            return {
                "status": "error",
                "message": "Job already running"
            }

        if not self.should_run_now():
            return {
                "status": "skipped",
                "message": "Outside scheduled window or already ran today"
            }

        self.is_running = True

        try:
            report = await self.generate_report()
            self.last_run = datetime.now()
            result = {
                "status": "success",
                "report": report,
            }

        except Exception as e:
            result = {
                "status": "error",
                "message": str(e)
            }

        finally:
            self.is_running = False

        return result

    def get_next_run_time(self) -> datetime:
        """Get next scheduled run time"""
        now = datetime.now()
        next_run, end_window = self._window(now)

        # If already past today's window, schedule for tomorrow
        if now > end_window:
            next_run += timedelta(days=1)

        return next_run
