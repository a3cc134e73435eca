from models.additional_info import AdditionalInfo
from models.substitution import Substitution, SubstitutionBuilder
from models.schedule_day import SubstitutionScheduleDay
from models.schedule import ScheduleType, SubstitutionSchedule
from models.raw import ColumnType, RawCell, RawDay, RawPage, RawRow, ScheduleAdapter

__all__ = [
    "AdditionalInfo",
    "Substitution",
    "SubstitutionBuilder",
    "SubstitutionScheduleDay",
    "ScheduleType",
    "SubstitutionSchedule",
    "ColumnType",
    "RawCell",
    "RawDay",
    "RawPage",
    "RawRow",
    "ScheduleAdapter",
]
