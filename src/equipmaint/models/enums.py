from enum import Enum

from equipmaint.exceptions import InvalidTransitionError, ValidationError


class _LabelEnum(str, Enum):
    """String enum stored and serialized by its human-readable value."""

    @classmethod
    def lookup(cls, raw: str):
        """Match a raw string against member values or names, ignoring case."""
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip().casefold()
        for member in cls:
            if key in (member.value.casefold(), member.name.casefold()):
                return member
        return None

    @classmethod
    def parse(cls, raw: str):
        member = cls.lookup(raw)
        if member is None:
            raise ValidationError(
                f"Unrecognized {cls.__name__} value: {raw!r}", field=cls.__name__
            )
        return member


class WorkOrderType(_LabelEnum):
    PREVENTIVE = "Preventive"
    CORRECTIVE = "Corrective"
    CALIBRATION = "Calibration"
    INSPECTION = "Inspection"


class Priority(_LabelEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class WorkOrderStatus(_LabelEnum):
    REPORTED = "Reported"
    PENDING = "Pending"  # legacy alias of Reported
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, raw: str) -> "WorkOrderStatus":
        member = cls.lookup(raw)
        if member is None:
            raise InvalidTransitionError(
                f"Unrecognized work order status: {raw!r}", target_status=str(raw)
            )
        return member

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_unassigned_queue(self) -> bool:
        return self in (WorkOrderStatus.REPORTED, WorkOrderStatus.PENDING)


class Frequency(_LabelEnum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"


TERMINAL_STATUSES = frozenset({WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[WorkOrderStatus, frozenset[WorkOrderStatus]] = {
    WorkOrderStatus.REPORTED: frozenset(
        {WorkOrderStatus.ASSIGNED, WorkOrderStatus.CANCELLED}
    ),
    WorkOrderStatus.PENDING: frozenset(
        {WorkOrderStatus.ASSIGNED, WorkOrderStatus.CANCELLED}
    ),
    WorkOrderStatus.ASSIGNED: frozenset(
        {
            WorkOrderStatus.IN_PROGRESS,
            WorkOrderStatus.ON_HOLD,
            WorkOrderStatus.CANCELLED,
        }
    ),
    WorkOrderStatus.IN_PROGRESS: frozenset(
        {
            WorkOrderStatus.ON_HOLD,
            WorkOrderStatus.COMPLETED,
            WorkOrderStatus.CANCELLED,
        }
    ),
    WorkOrderStatus.ON_HOLD: frozenset(
        {
            WorkOrderStatus.IN_PROGRESS,
            WorkOrderStatus.COMPLETED,
            WorkOrderStatus.CANCELLED,
        }
    ),
    WorkOrderStatus.COMPLETED: frozenset(),
    WorkOrderStatus.CANCELLED: frozenset(),
}
