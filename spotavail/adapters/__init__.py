"""
Adapters layer - Schedule stores (local files, hosted REST tables).
"""

from .file_store import FileScheduleStore
from .records import build_spot_schedule
from .rest_store import RestScheduleStore

__all__ = ["FileScheduleStore", "RestScheduleStore", "build_spot_schedule"]
