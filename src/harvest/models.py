from dataclasses import dataclass
from datetime import date, datetime
import pytz

from harvest.errors import MalformedDataError


def _unwrap(data, key):
    """
    Return the resource map from a decoded JSON object.

    Harvest wraps every resource in a single-key envelope such as
    {"client": {...}}. Both the envelope and the bare object are accepted.

    Raises:
        MalformedDataError: if data is not a map
    """
    if not isinstance(data, dict):
        raise MalformedDataError(f"Expected a {key} object, got {type(data).__name__}")
    if len(data) == 1 and isinstance(data.get(key), dict):
        return data[key]
    return data


def _int(data, field):
    value = data.get(field)
    if value is None:
        return None
    # bool is an int subclass but never a valid identifier
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedDataError(f"Field '{field}' should be an integer, got {value!r}")
    return value


def _float(data, field, default=None):
    value = data.get(field)
    if value is None:
        return default
    if isinstance(value, bool):
        raise MalformedDataError(f"Field '{field}' should be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        raise MalformedDataError(f"Field '{field}' should be a number, got {value!r}")


def _str(data, field):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedDataError(f"Field '{field}' should be a string, got {value!r}")
    return value


def _bool(data, field, default=None):
    value = data.get(field)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise MalformedDataError(f"Field '{field}' should be a boolean, got {value!r}")
    return value


def _datetime(data, field):
    """Parse an ISO 8601 timestamp into an aware UTC datetime."""
    value = _str(data, field)
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise MalformedDataError(f"Field '{field}' is not a valid timestamp: {value!r}")
    if parsed.tzinfo is None:
        return pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)


def _date(data, field):
    value = _str(data, field)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise MalformedDataError(f"Field '{field}' is not a valid date: {value!r}")


@dataclass(frozen=True)
class User:
    identifier: int = None
    email: str = None
    first_name: str = None
    last_name: str = None
    is_admin: bool = False
    is_active: bool = True
    is_contractor: bool = None
    telephone: str = None
    department: str = None
    timezone: str = None
    default_hourly_rate: float = None
    cost_rate: float = None
    created_at: datetime = None
    updated_at: datetime = None

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @classmethod
    def from_dict(cls, data):
        data = _unwrap(data, "user")
        return cls(
            identifier=_int(data, 'id'),
            email=_str(data, 'email'),
            first_name=_str(data, 'first_name'),
            last_name=_str(data, 'last_name'),
            is_admin=_bool(data, 'is_admin', False),
            is_active=_bool(data, 'is_active', True),
            is_contractor=_bool(data, 'is_contractor'),
            telephone=_str(data, 'telephone'),
            department=_str(data, 'department'),
            timezone=_str(data, 'timezone'),
            default_hourly_rate=_float(data, 'default_hourly_rate'),
            cost_rate=_float(data, 'cost_rate'),
            created_at=_datetime(data, 'created_at'),
            updated_at=_datetime(data, 'updated_at'),
        )


@dataclass(frozen=True)
class Timer:
    """A single day entry. Running timers have timer_started_at set."""

    identifier: int = None
    user_id: int = None
    project_id: int = None
    task_id: int = None
    project: str = None
    task: str = None
    client: str = None
    notes: str = None
    hours: float = 0.0
    hours_without_timer: float = None
    spent_at: date = None
    timer_started_at: datetime = None
    created_at: datetime = None
    updated_at: datetime = None

    @property
    def is_running(self):
        return self.timer_started_at is not None

    @classmethod
    def from_dict(cls, data):
        data = _unwrap(data, "day_entry")
        # Harvest sends ids inside day entries as strings on some accounts
        for field in ('project_id', 'task_id'):
            if isinstance(data.get(field), str) and data[field].isdecimal():
                data = {**data, field: int(data[field])}
        return cls(
            identifier=_int(data, 'id'),
            user_id=_int(data, 'user_id'),
            project_id=_int(data, 'project_id'),
            task_id=_int(data, 'task_id'),
            project=_str(data, 'project'),
            task=_str(data, 'task'),
            client=_str(data, 'client'),
            notes=_str(data, 'notes'),
            hours=_float(data, 'hours', 0.0),
            hours_without_timer=_float(data, 'hours_without_timer'),
            spent_at=_date(data, 'spent_at'),
            timer_started_at=_datetime(data, 'timer_started_at'),
            created_at=_datetime(data, 'created_at'),
            updated_at=_datetime(data, 'updated_at'),
        )


@dataclass(frozen=True)
class Project:
    identifier: int = None
    client_id: int = None
    name: str = None
    code: str = None
    active: bool = True
    billable: bool = False
    bill_by: str = None
    budget: float = None
    budget_by: str = None
    hourly_rate: float = None
    notes: str = None
    created_at: datetime = None
    updated_at: datetime = None

    @classmethod
    def from_dict(cls, data):
        data = _unwrap(data, "project")
        return cls(
            identifier=_int(data, 'id'),
            client_id=_int(data, 'client_id'),
            name=_str(data, 'name'),
            code=_str(data, 'code'),
            active=_bool(data, 'active', True),
            billable=_bool(data, 'billable', False),
            bill_by=_str(data, 'bill_by'),
            budget=_float(data, 'budget'),
            budget_by=_str(data, 'budget_by'),
            hourly_rate=_float(data, 'hourly_rate'),
            notes=_str(data, 'notes'),
            created_at=_datetime(data, 'created_at'),
            updated_at=_datetime(data, 'updated_at'),
        )


@dataclass
class Client:
    """
    A Harvest client (the customer being billed, not this library).

    Unlike the other models a Client is built by callers too: set at least
    `name` before creating one, and keep `identifier` for updates. Leave
    `active` as None to keep the status Harvest already has; decoded clients
    default it to True.
    """

    name: str = None
    identifier: int = None
    active: bool = None
    currency: str = None
    currency_symbol: str = None
    details: str = None
    highrise_id: int = None
    default_invoice_timeframe: str = None
    created_at: datetime = None
    updated_at: datetime = None

    # Fields Harvest accepts on create and update
    WRITABLE_FIELDS = ('name', 'active', 'currency', 'details', 'highrise_id', 'default_invoice_timeframe')

    @classmethod
    def from_dict(cls, data):
        data = _unwrap(data, "client")
        return cls(
            identifier=_int(data, 'id'),
            name=_str(data, 'name'),
            active=_bool(data, 'active', True),
            currency=_str(data, 'currency'),
            currency_symbol=_str(data, 'currency_symbol'),
            details=_str(data, 'details'),
            highrise_id=_int(data, 'highrise_id'),
            default_invoice_timeframe=_str(data, 'default_invoice_timeframe'),
            created_at=_datetime(data, 'created_at'),
            updated_at=_datetime(data, 'updated_at'),
        )

    def to_dict(self):
        """Serialize the writable fields into a request body, leaving out unset values."""
        body = {}
        for field in self.WRITABLE_FIELDS:
            value = getattr(self, field)
            if value is not None:
                body[field] = value
        return {"client": body}
