"""Day and week aggregation of the meal ledger."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from nutriplus.domain.meals import MealRecord
from nutriplus.domain.stats import ZERO_TOTALS, Bucket, MacroTotals, SeriesMode

DAY_BUCKETS = 7
WEEK_BUCKETS = 4
SUNDAY = 6


@dataclass(frozen=True)
class CalendarLocale:
    """Locale data for chart labels and the first day of the week."""

    code: str
    first_weekday: int
    weekday_abbrevs: tuple[str, str, str, str, str, str, str]
    today: str
    current: str
    last: str
    weeks_ago_template: str

    def weekday_label(self, day: date) -> str:
        return self.weekday_abbrevs[day.weekday()]

    def weeks_ago(self, count: int) -> str:
        return self.weeks_ago_template.format(count=count)


EN_US = CalendarLocale(
    code="en-US",
    first_weekday=SUNDAY,
    weekday_abbrevs=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    today="Today",
    current="Current",
    last="Last",
    weeks_ago_template="{count} weeks ago",
)

PT_BR = CalendarLocale(
    code="pt-BR",
    first_weekday=SUNDAY,
    weekday_abbrevs=("Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom"),
    today="Hoje",
    current="Atual",
    last="Passada",
    weeks_ago_template="{count} sem atrás",
)

_LOCALES = {locale.code.lower(): locale for locale in (EN_US, PT_BR)}


def get_locale(code: str | None) -> CalendarLocale:
    """Return a built-in locale, falling back to en-US."""
    if not code:
        return EN_US
    return _LOCALES.get(code.lower(), EN_US)


def daily_totals(
    records: Iterable[MealRecord], reference: datetime | date, tz: tzinfo
) -> MacroTotals:
    """Sum macros of every record on the local calendar day of ``reference``.

    A ``date`` reference is taken as already local. Two instants share a day
    when their local year, month and day all match.
    """
    if isinstance(reference, datetime):
        return _aggregate_day(_local_date(reference, tz), records, tz)
    return _aggregate_day(reference, records, tz)


def series(
    records: Iterable[MealRecord],
    mode: SeriesMode,
    now: datetime,
    tz: tzinfo,
    locale: CalendarLocale = EN_US,
) -> list[Bucket]:
    """Return calorie buckets, oldest first, ending with the current period."""
    snapshot = tuple(records)
    today = _local_date(now, tz)
    if mode is SeriesMode.DAYS:
        return _day_buckets(snapshot, today, tz, locale)
    return _week_buckets(snapshot, today, tz, locale)


def week_start(day: date, first_weekday: int) -> date:
    """Return the first day of the week containing ``day``."""
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)


def local_midnight(day: date, tz: tzinfo) -> datetime:
    """Return the UTC instant of local midnight starting ``day``."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(UTC)


def _day_buckets(
    records: tuple[MealRecord, ...],
    today: date,
    tz: tzinfo,
    locale: CalendarLocale,
) -> list[Bucket]:
    buckets = []
    for offset in range(DAY_BUCKETS - 1, -1, -1):
        day = today - timedelta(days=offset)
        label = locale.today if offset == 0 else locale.weekday_label(day)
        buckets.append(
            _bucket(label, day, day + timedelta(days=1), records, tz)
        )
    return buckets


def _week_buckets(
    records: tuple[MealRecord, ...],
    today: date,
    tz: tzinfo,
    locale: CalendarLocale,
) -> list[Bucket]:
    current_start = week_start(today, locale.first_weekday)
    buckets = []
    for weeks_back in range(WEEK_BUCKETS - 1, -1, -1):
        start = current_start - timedelta(days=7 * weeks_back)
        if weeks_back == 0:
            label = locale.current
        elif weeks_back == 1:
            label = locale.last
        else:
            label = locale.weeks_ago(weeks_back)
        buckets.append(_bucket(label, start, start + timedelta(days=7), records, tz))
    return buckets


def _bucket(
    label: str,
    first_day: date,
    end_day: date,
    records: tuple[MealRecord, ...],
    tz: tzinfo,
) -> Bucket:
    start = local_midnight(first_day, tz)
    end = local_midnight(end_day, tz)
    calories = sum(
        (record.calories for record in records if start <= record.timestamp < end),
        0.0,
    )
    return Bucket(label=label, start=start, end=end, calories=calories)


def _aggregate_day(
    day: date, records: Iterable[MealRecord], tz: tzinfo
) -> MacroTotals:
    total = ZERO_TOTALS
    for record in records:
        if _local_date(record.timestamp, tz) != day:
            continue
        total = MacroTotals(
            calories=total.calories + record.calories,
            protein=total.protein + record.protein,
            carbs=total.carbs + record.carbs,
            fat=total.fat + record.fat,
        )
    return total


def _local_date(instant: datetime, tz: tzinfo) -> date:
    return instant.astimezone(tz).date()


@dataclass(frozen=True)
class DaySummary:
    """Totals and meals for one local day."""

    day: date
    totals: MacroTotals
    meals: list[MealRecord]


@dataclass
class StatsService:
    """Service for computing ledger stats in a user's timezone."""

    locale: CalendarLocale = EN_US

    def get_day(
        self,
        records: Iterable[MealRecord],
        timezone_name: str,
        day: date | None = None,
        now: datetime | None = None,
    ) -> DaySummary:
        """Return totals and meals for a local day, defaulting to today."""
        tz = ZoneInfo(timezone_name)
        snapshot = tuple(records)
        resolved_day = day or _local_date(now or datetime.now(tz=UTC), tz)
        meals = [
            record
            for record in snapshot
            if _local_date(record.timestamp, tz) == resolved_day
        ]
        return DaySummary(
            day=resolved_day,
            totals=_aggregate_day(resolved_day, meals, tz),
            meals=meals,
        )

    def get_series(
        self,
        records: Iterable[MealRecord],
        mode: SeriesMode,
        timezone_name: str,
        now: datetime | None = None,
    ) -> list[Bucket]:
        """Return the chart series for a mode in the user's timezone."""
        return series(
            records,
            mode,
            now or datetime.now(tz=UTC),
            ZoneInfo(timezone_name),
            self.locale,
        )
