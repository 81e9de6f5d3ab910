"""출석 시간대 판정 엔진입니다. 시간 파싱, 입실/퇴실 구간 분류, 지각 판정, 안내 메시지 생성을 담당합니다.

모든 함수는 입력만으로 결과가 결정되는 순수 함수이며 웹/DB 계층에 의존하지 않습니다.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Union

WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
DEFAULT_GRACE_PERIOD_MINUTES = 15
MINUTES_PER_DAY = 24 * 60

NO_WINDOW_MESSAGE = "No valid attendance window available"
INVALID_TIME_ERROR = "Invalid time format"
MISSING_TIME_ERROR = "Missing time"

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?:\s+([AaPp][Mm]))?$")


class InvalidTimeError(ValueError):
    pass


class InvalidScheduleError(ValueError):
    pass


class AttendanceType(str, Enum):
    TIME_IN = "timeIn"
    TIME_OUT = "timeOut"
    OUTSIDE = "outside"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


def _render_12_hour(hour24: int, minute: int) -> str:
    period = "PM" if hour24 >= 12 else "AM"
    hour12 = 12 if hour24 == 0 else hour24 - 12 if hour24 > 12 else hour24
    return f"{hour12}:{minute:02d} {period}"


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock minutes since midnight, 0..1439. Build it with parse_time()."""

    minutes: int

    def __post_init__(self):
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, int):
            raise InvalidTimeError(f"minutes must be an int, got {self.minutes!r}")
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidTimeError(f"minutes out of range: {self.minutes}")

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_24_hour(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return _render_12_hour(self.hour, self.minute)

    @classmethod
    def parse(cls, raw: str) -> "TimeOfDay":
        parsed = parse_time(raw)
        if parsed is None:
            raise InvalidTimeError(f"{INVALID_TIME_ERROR}: {raw!r}")
        return parsed


TimeInput = Union[TimeOfDay, str, None]


def parse_time(raw) -> Optional[TimeOfDay]:
    """Parse "h:mm AM/PM" or 24-hour "HH:MM". Returns None when the value cannot be read."""
    if not isinstance(raw, str):
        return None
    match = _TIME_RE.match(raw.strip())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = match.group(3)
    if minutes > 59:
        return None

    if period is None:
        # 24시간 표기는 12시간 표기로 바꾼 뒤 같은 변환 경로를 탄다.
        if hours > 23:
            return None
        return parse_time(_render_12_hour(hours, minutes))

    if not 1 <= hours <= 12:
        return None
    total = hours * 60 + minutes
    period = period.upper()
    if period == "PM" and hours != 12:
        total += 12 * 60
    elif period == "AM" and hours == 12:
        total -= 12 * 60
    return TimeOfDay(total)


def to_12_hour(raw) -> Optional[str]:
    parsed = parse_time(raw)
    return str(parsed) if parsed is not None else None


def _coerce_time(value: TimeInput) -> Optional[TimeOfDay]:
    if isinstance(value, TimeOfDay):
        return value
    return parse_time(value)


def normalize_weekday(raw) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    text = raw.strip().capitalize()
    return text if text in WEEKDAYS else None


def weekday_name(value: Union[date, datetime]) -> str:
    # date.weekday()는 월요일=0, WEEKDAYS는 일요일부터 시작
    return WEEKDAYS[(value.weekday() + 1) % 7]


def time_of(value: datetime) -> TimeOfDay:
    return TimeOfDay(value.hour * 60 + value.minute)


@dataclass(frozen=True)
class TimeWindow:
    start: TimeOfDay
    end: TimeOfDay

    def contains(self, moment: TimeOfDay) -> bool:
        return self.start <= moment <= self.end

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


def _first_present(*values: Optional[TimeOfDay]) -> Optional[TimeOfDay]:
    for value in values:
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class DaySchedule:
    """One section's check-in/check-out windows for one weekday.

    ``time_in_end`` and ``time_out_start`` may be missing on legacy schedules.
    A missing time-in end closes the time-in window where time-out opens, and
    a missing time-out start opens the time-out window where time-in closes.
    """

    day: str
    time_in_start: TimeOfDay
    time_out_end: TimeOfDay
    time_in_end: Optional[TimeOfDay] = None
    time_out_start: Optional[TimeOfDay] = None
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    schedule_id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if self.day not in WEEKDAYS:
            raise InvalidScheduleError(f"unknown weekday: {self.day!r}")
        if isinstance(self.grace_period_minutes, bool) or not isinstance(self.grace_period_minutes, int):
            raise InvalidScheduleError("grace_period_minutes must be an int")
        if self.grace_period_minutes < 0:
            raise InvalidScheduleError("grace_period_minutes must not be negative")
        # 누락된 경계를 채운 실제 구간 기준으로 검사한다.
        for label, window in (("time in", self.time_in_window), ("time out", self.time_out_window)):
            if window.start > window.end:
                raise InvalidScheduleError(f"{label} window starts after it ends ({window})")

    @property
    def time_in_window(self) -> TimeWindow:
        end = _first_present(self.time_in_end, self.time_out_start, self.time_out_end)
        return TimeWindow(self.time_in_start, end)

    @property
    def time_out_window(self) -> TimeWindow:
        start = _first_present(self.time_out_start, self.time_in_end, self.time_in_start)
        return TimeWindow(start, self.time_out_end)

    @property
    def has_overlapping_windows(self) -> bool:
        return self.time_in_window.end > self.time_out_window.start

    @classmethod
    def from_strings(
        cls,
        day: str,
        time_in_start: Optional[str],
        time_out_end: Optional[str],
        time_in_end: Optional[str] = None,
        time_out_start: Optional[str] = None,
        grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
        schedule_id: Optional[int] = None,
    ) -> "DaySchedule":
        def required(name: str, raw: Optional[str]) -> TimeOfDay:
            parsed = parse_time(raw)
            if parsed is None:
                raise InvalidScheduleError(f"{name}: {INVALID_TIME_ERROR} ({raw!r})")
            return parsed

        def optional(name: str, raw: Optional[str]) -> Optional[TimeOfDay]:
            if raw is None or not str(raw).strip():
                return None
            return required(name, raw)

        return cls(
            day=normalize_weekday(day) or str(day),
            time_in_start=required("time_in_start", time_in_start),
            time_out_end=required("time_out_end", time_out_end),
            time_in_end=optional("time_in_end", time_in_end),
            time_out_start=optional("time_out_start", time_out_start),
            grace_period_minutes=grace_period_minutes,
            schedule_id=schedule_id,
        )


@dataclass(frozen=True)
class WindowClassification:
    kind: AttendanceType
    message: str
    window: Optional[TimeWindow] = None

    @property
    def is_outside(self) -> bool:
        return self.kind == AttendanceType.OUTSIDE

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "message": self.message}


def _outside(message: str) -> WindowClassification:
    return WindowClassification(AttendanceType.OUTSIDE, message)


def _hours_minutes(total: int) -> str:
    return f"{total // 60}h {total % 60}m"


def classify_window(schedule: DaySchedule, observed_day: str, observed_time: TimeInput) -> WindowClassification:
    """Decide whether an observation falls in the time-in window, the time-out window, or neither.

    Time-in is checked before time-out, so overlapping windows resolve to time-in.
    """
    if observed_day != schedule.day:
        return _outside(f"No schedule for {observed_day}. Schedule is for {schedule.day}.")

    moment = _coerce_time(observed_time)
    if moment is None:
        return _outside(NO_WINDOW_MESSAGE)

    time_in = schedule.time_in_window
    time_out = schedule.time_out_window

    if time_in.contains(moment):
        return WindowClassification(AttendanceType.TIME_IN, f"Time In: {time_in}", time_in)
    if time_out.contains(moment):
        return WindowClassification(AttendanceType.TIME_OUT, f"Time Out: {time_out}", time_out)
    if moment < time_in.start:
        wait = time_in.start.minutes - moment.minutes
        return _outside(f"Too early. Time In starts at {time_in.start} (in {_hours_minutes(wait)})")
    if moment > time_out.end:
        since = moment.minutes - time_out.end.minutes
        return _outside(f"Too late. Time Out ended at {time_out.end} ({_hours_minutes(since)} ago)")
    if time_in.end < moment < time_out.start:
        return _outside(f"Break time. Time Out starts at {time_out.start}")
    return _outside(NO_WINDOW_MESSAGE)


def select_active_schedule(
    schedules: Iterable[DaySchedule],
    observed_day: str,
    observed_time: TimeInput,
) -> Optional[DaySchedule]:
    todays = [s for s in schedules if s.day == observed_day]
    if not todays:
        return None
    moment = _coerce_time(observed_time)
    if moment is not None:
        for schedule in todays:
            if schedule.time_in_window.contains(moment) or schedule.time_out_window.contains(moment):
                return schedule
    return todays[0]


@dataclass(frozen=True)
class StatusResult:
    status: AttendanceStatus
    minutes_late: int
    is_on_time: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "minutes_late": self.minutes_late,
            "is_on_time": self.is_on_time,
            "error": self.error,
        }


def _failure_reason(raw: TimeInput) -> str:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return MISSING_TIME_ERROR
    return INVALID_TIME_ERROR


def evaluate_status(
    scheduled_time: TimeInput,
    actual_time: TimeInput,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
) -> StatusResult:
    """Compare an actual tap with the scheduled time.

    Arriving exactly at the end of the grace period still counts as present.
    No midnight wraparound: a tap after midnight reads as very early.
    """
    scheduled = _coerce_time(scheduled_time)
    actual = _coerce_time(actual_time)
    if scheduled is None or actual is None:
        reason = _failure_reason(scheduled_time if scheduled is None else actual_time)
        return StatusResult(AttendanceStatus.ABSENT, 0, False, error=reason)

    minutes_late = actual.minutes - scheduled.minutes
    if minutes_late <= 0:
        return StatusResult(AttendanceStatus.PRESENT, 0, True)
    if minutes_late <= grace_period_minutes:
        return StatusResult(AttendanceStatus.PRESENT, minutes_late, False)
    return StatusResult(AttendanceStatus.LATE, minutes_late, False)


def grace_period_end(scheduled_time: TimeInput, grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES) -> Optional[TimeOfDay]:
    scheduled = _coerce_time(scheduled_time)
    if scheduled is None:
        return None
    return TimeOfDay((scheduled.minutes + grace_period_minutes) % MINUTES_PER_DAY)


def format_attendance_message(result: StatusResult, attendance_type: Union[AttendanceType, str] = AttendanceType.TIME_IN) -> str:
    direction = attendance_type.value if isinstance(attendance_type, AttendanceType) else attendance_type
    verb = "Checked out" if direction == AttendanceType.TIME_OUT.value else "Checked in"

    if result.status == AttendanceStatus.PRESENT:
        if result.is_on_time:
            return f"{verb} on time"
        return f"{verb} {result.minutes_late} minutes late (within grace period)"
    if result.status == AttendanceStatus.LATE:
        return f"{verb} {result.minutes_late} minutes late"
    return "Marked as absent"
