"""Driver derivation: raw health input -> normalized drivers.

Pure and total. Malformed values (wrong type, NaN) degrade to ``None`` or to
the documented default instead of raising.
"""

from __future__ import annotations

import math
from typing import Any

from lifelens.domains.wellness.domain_logic.models import (
    KNOWN_TRENDS,
    TARGET_SLEEP_HOURS,
    Drivers,
    RawHealthInput,
)


def _num(val: Any) -> float | None:
    """Coerce to a number, or ``None`` for missing, non-numeric or non-finite values."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        number = val
    else:
        try:
            number = float(str(val).strip())
        except ValueError:
            return None
        if number.is_integer():
            number = int(number)
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def _flag(val: Any) -> bool | None:
    """Coerce to a boolean; strings like 'true'/'yes'/'1' count as set."""
    if val is None:
        return None
    if isinstance(val, bool):
        return val
    if isinstance(val, (int, float)):
        return bool(val) and not math.isnan(val)
    return str(val).strip().lower() in {"true", "yes", "y", "1"}


def coerce_trend(value: Any) -> str:
    """Map anything outside {up, down, flat} to 'unknown'."""
    return value if isinstance(value, str) and value in KNOWN_TRENDS else "unknown"


def sleep_debt(sleep_hours: Any) -> float:
    """Hours short of the nightly target, never negative.

    Unknown sleep counts as no debt.
    """
    hours = _num(sleep_hours)
    if hours is None:
        return 0.0
    return max(0.0, TARGET_SLEEP_HOURS - hours)


def derive_drivers(raw: RawHealthInput) -> Drivers:
    """Normalize a raw input record into the drivers the rules read.

    Note the resting heart rate trend is passed through as given, while the
    HRV and mood trends are coerced.
    """
    alcohol = _num(raw.alcohol_units_week)
    late_meals = _num(raw.late_meals_per_week)
    return Drivers(
        sleep_debt_hours=sleep_debt(raw.sleep_hours_avg_7d),
        late_screen_mins=_num(raw.late_screen_mins_avg_7d),
        avg_steps_7d=_num(raw.steps_avg_7d),
        caffeine_load_mg=_num(raw.caffeine_mg_day),
        resting_hr_trend=raw.resting_hr_trend_14d,
        hrv_trend=coerce_trend(raw.hrv_trend_14d),
        aqi_level=_num(raw.aqi_daily_max),
        sedentary_hours=_num(raw.sedentary_hours_day),
        circadian_shift_mins=0,
        alcohol_units_week=alcohol if alcohol is not None else 0,
        smoking_status=raw.smoking_status if raw.smoking_status is not None else "none",
        bmi=_num(raw.bmi),
        mood_trend=coerce_trend(raw.mood_trend_14d),
        water_advisory_flag=bool(_flag(raw.water_advisory_flag)),
        allergens_high_today=bool(_flag(raw.allergens_high_today)),
        late_meals_per_week=late_meals if late_meals is not None else 0,
        fam_hx_hypertension=_num(raw.fam_hx_hypertension),
        fam_hx_diabetes=_num(raw.fam_hx_diabetes),
        age=_num(raw.age),
        sex_at_birth=raw.sex_at_birth,
    )
