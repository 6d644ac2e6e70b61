"""Wellness engine data model: raw inputs, drivers, triggers, engine output."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

TARGET_SLEEP_HOURS = 8.0

KNOWN_TRENDS = frozenset({"up", "down", "flat"})


class Category(str, Enum):
    """Closed set of wellness categories a trigger or card may carry."""

    SLEEP_DEBT = "Sleep debt"
    SCREEN_TIME = "Screen time"
    SEDENTARY_LIFESTYLE = "Sedentary lifestyle"
    EXERCISE = "Exercise"
    CAFFEINE = "Caffeine"
    MIGRAINE = "Migraine"
    HEART_RATE = "Heart rate"
    STRESS = "Stress"
    AIR_QUALITY = "Air quality"
    ENVIRONMENTAL_ALLERGIES = "Environmental allergies"
    WATER_QUALITY = "Water quality"
    HYDRATION = "Hydration"
    CIRCADIAN_DISRUPTION = "Circadian disruption"
    MOOD = "Mood"
    ANXIETY = "Anxiety"
    DEPRESSION = "Depression"
    WEIGHT_MANAGEMENT = "Weight management"
    PREDIABETES = "Prediabetes"
    DIABETES_TYPE_2 = "Diabetes (type 2)"
    HYPERTENSION = "Hypertension"
    ALCOHOL_USE = "Alcohol use"
    SMOKING = "Smoking"
    SLEEP_APNEA = "Sleep apnea"
    SOCIAL_ISOLATION = "Social isolation"
    GERD = "GERD (acid reflux)"


CATEGORY_NAMES = frozenset(c.value for c in Category)


class TriggerType(str, Enum):
    INSIGHT = "insight"
    ACTION = "action"
    ALERT = "alert"


TRIGGER_TYPE_NAMES = frozenset(t.value for t in TriggerType)


# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------

# Wire (camelCase) key -> attribute name
_RAW_KEYS: dict[str, str] = {
    "age": "age",
    "sexAtBirth": "sex_at_birth",
    "bmi": "bmi",
    "famHxHypertension": "fam_hx_hypertension",
    "famHxDiabetes": "fam_hx_diabetes",
    "sleepHoursAvg7d": "sleep_hours_avg_7d",
    "lateScreenMinsAvg7d": "late_screen_mins_avg_7d",
    "stepsAvg7d": "steps_avg_7d",
    "restingHRTrend14d": "resting_hr_trend_14d",
    "hrvTrend14d": "hrv_trend_14d",
    "caffeineMgDay": "caffeine_mg_day",
    "sedentaryHoursDay": "sedentary_hours_day",
    "alcoholUnitsWeek": "alcohol_units_week",
    "smokingStatus": "smoking_status",
    "moodTrend14d": "mood_trend_14d",
    "aqiDailyMax": "aqi_daily_max",
    "waterAdvisoryFlag": "water_advisory_flag",
    "allergensHighToday": "allergens_high_today",
    "lateMealsPerWeek": "late_meals_per_week",
}


@dataclass(frozen=True)
class RawHealthInput:
    """Self-reported and device-derived metrics, as supplied by the caller.

    Every field is optional. Values are kept exactly as given; normalization
    happens in ``derive_drivers``.
    """

    age: Any = None
    sex_at_birth: Any = None              # male | female | other | unknown
    bmi: Any = None
    fam_hx_hypertension: Any = None       # 0-2
    fam_hx_diabetes: Any = None           # 0-2
    sleep_hours_avg_7d: Any = None
    late_screen_mins_avg_7d: Any = None
    steps_avg_7d: Any = None
    resting_hr_trend_14d: Any = None      # up | down | flat | unknown
    hrv_trend_14d: Any = None
    caffeine_mg_day: Any = None
    sedentary_hours_day: Any = None
    alcohol_units_week: Any = None
    smoking_status: Any = None            # none | former | current
    mood_trend_14d: Any = None
    aqi_daily_max: Any = None
    water_advisory_flag: Any = None
    allergens_high_today: Any = None
    late_meals_per_week: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> RawHealthInput:
        """Build from camelCase wire keys or snake_case attribute names.

        Unknown keys are ignored.
        """
        if not data:
            return cls()
        attrs = set(_RAW_KEYS.values())
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _RAW_KEYS.get(key, key)
            if name in attrs:
                values[name] = value
        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        """Return the camelCase wire form, omitting absent fields."""
        out: dict[str, Any] = {}
        for key, name in _RAW_KEYS.items():
            value = getattr(self, name)
            if value is not None:
                out[key] = value
        return out


# ---------------------------------------------------------------------------
# Drivers
# ---------------------------------------------------------------------------

_DRIVER_KEYS: dict[str, str] = {
    "sleep_debt_hours": "sleepDebtHours",
    "late_screen_mins": "lateScreenMins",
    "avg_steps_7d": "avgSteps7d",
    "caffeine_load_mg": "caffeineLoadMg",
    "resting_hr_trend": "restingHRTrend",
    "hrv_trend": "hrvTrend",
    "aqi_level": "aqiLevel",
    "sedentary_hours": "sedentaryHours",
    "circadian_shift_mins": "circadianShiftMins",
    "alcohol_units_week": "alcoholUnitsWeek",
    "smoking_status": "smokingStatus",
    "bmi": "bmi",
    "mood_trend": "moodTrend",
    "water_advisory_flag": "waterAdvisoryFlag",
    "allergens_high_today": "allergensHighToday",
    "late_meals_per_week": "lateMealsPerWeek",
    "fam_hx_hypertension": "famHxHypertension",
    "fam_hx_diabetes": "famHxDiabetes",
    "age": "age",
    "sex_at_birth": "sexAtBirth",
}


@dataclass(frozen=True)
class Drivers:
    """Normalized values the rule battery reads. ``None`` means unknown."""

    sleep_debt_hours: float = 0.0
    late_screen_mins: float | None = None
    avg_steps_7d: float | None = None
    caffeine_load_mg: float | None = None
    resting_hr_trend: Any = None          # passed through unvalidated
    hrv_trend: str = "unknown"
    aqi_level: float | None = None
    sedentary_hours: float | None = None
    circadian_shift_mins: int = 0
    alcohol_units_week: float = 0
    smoking_status: str = "none"
    bmi: float | None = None
    mood_trend: str = "unknown"
    water_advisory_flag: bool = False
    allergens_high_today: bool = False
    late_meals_per_week: float = 0
    fam_hx_hypertension: float | None = None
    fam_hx_diabetes: float | None = None
    age: float | None = None
    sex_at_birth: Any = None

    def as_dict(self) -> dict[str, Any]:
        """Return the camelCase wire form."""
        return {_DRIVER_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Trigger:
    """A single fired-rule result."""

    category: Category
    type: TriggerType
    severity: int                         # 1 (mild) .. 3 (severe)
    confidence: float                     # static per-rule weight, 0-1
    reasons: tuple[str, ...] = ()
    metric_callouts: tuple[str, ...] = ()

    def identity_key(self) -> str:
        """Signature two triggers share when they are semantically identical."""
        return "|".join([
            self.category.value,
            self.type.value,
            str(self.severity),
            str(self.confidence),
            ",".join(self.metric_callouts),
        ])

    def as_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "type": self.type.value,
            "severity": self.severity,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "metric_callouts": list(self.metric_callouts),
        }


@dataclass(frozen=True)
class EngineOutput:
    """Result of one risk engine invocation."""

    drivers: Drivers
    triggers: tuple[Trigger, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "drivers": self.drivers.as_dict(),
            "triggers": [t.as_dict() for t in self.triggers],
        }
