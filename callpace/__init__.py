"""
Call Pacing Board - Core Modules
"""

from .aggregator import DailySummary, DayLedger, summarize
from .dashboard import PacingDashboard
from .models import CheckpointEntry, DaySettings, EntryValidationError, ReadOnlyDayError
from .pacing import PacingStatus, classify
from .projector import forecast
from .rollup import MonthlyRollup
from .scheduler import DayCloseScheduler
from .simulator import simulate

__all__ = [
    'CheckpointEntry',
    'DailySummary',
    'DayCloseScheduler',
    'DayLedger',
    'DaySettings',
    'EntryValidationError',
    'MonthlyRollup',
    'PacingDashboard',
    'PacingStatus',
    'ReadOnlyDayError',
    'classify',
    'forecast',
    'simulate',
    'summarize',
]

__version__ = '0.1.0'
