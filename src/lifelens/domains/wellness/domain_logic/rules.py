"""Deterministic rule battery: drivers -> wellness triggers.

Each rule is an independent predicate over the drivers plus a factory for the
trigger(s) it emits. Rules are evaluated in declaration order and never
short-circuit, so overlapping rules co-fire. Thresholds are exact: ``>`` and
``>=`` are not interchangeable.

Comparisons against an unknown (``None``) or NaN driver are always False.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lifelens.domains.wellness.domain_logic.models import (
    Category,
    Drivers,
    Trigger,
    TriggerType,
)


# ---------------------------------------------------------------------------
# Comparison helpers
# ---------------------------------------------------------------------------

def _known(v: Any) -> bool:
    return v is not None and not (isinstance(v, float) and math.isnan(v))


def _ge(v: Any, threshold: float) -> bool:
    return _known(v) and v >= threshold


def _gt(v: Any, threshold: float) -> bool:
    return _known(v) and v > threshold


def _lt(v: Any, threshold: float) -> bool:
    return _known(v) and v < threshold


def _between(v: Any, lo: float, hi: float) -> bool:
    """Half-open interval [lo, hi)."""
    return _known(v) and lo <= v < hi


# ---------------------------------------------------------------------------
# Metric callouts
# ---------------------------------------------------------------------------

def _fmt(v: Any) -> str:
    if not _known(v):
        return "n/a"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _fmt1(v: Any) -> str:
    return f"{v:.1f}" if _known(v) else "n/a"


def _sleep(d: Drivers) -> str:
    return f"Sleep debt {_fmt1(d.sleep_debt_hours)}h"


def _late_screen(d: Drivers) -> str:
    return f"Late screen {_fmt(d.late_screen_mins)}m"


def _steps(d: Drivers) -> str:
    return f"Steps {_fmt(d.avg_steps_7d)} (goal 7–10k)"


def _caffeine(d: Drivers) -> str:
    return f"Caffeine {_fmt(d.caffeine_load_mg)}mg"


def _aqi(d: Drivers) -> str:
    return f"AQI {_fmt(d.aqi_level)}"


def _rhr(d: Drivers) -> str:
    return f"RHR trend {d.resting_hr_trend if d.resting_hr_trend is not None else 'n/a'}"


def _bmi(d: Drivers) -> str:
    return f"BMI {_fmt1(d.bmi)}"


def _sedentary(d: Drivers) -> str:
    return f"Sedentary {_fmt(d.sedentary_hours)}h"


def _alcohol(d: Drivers) -> str:
    return f"Alcohol {_fmt(d.alcohol_units_week)}/wk"


def _trigger(
    category: Category,
    type_: TriggerType,
    severity: int,
    confidence: float,
    reasons: list[str],
    callouts: list[str],
) -> Trigger:
    return Trigger(
        category=category,
        type=type_,
        severity=severity,
        confidence=confidence,
        reasons=tuple(reasons),
        metric_callouts=tuple(callouts),
    )


# ---------------------------------------------------------------------------
# Rule descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """One entry of the battery: when ``condition`` holds, ``build`` fires."""

    name: str
    condition: Callable[[Drivers], bool]
    build: Callable[[Drivers], tuple[Trigger, ...]]


def _sleep_debt(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.SLEEP_DEBT, TriggerType.INSIGHT,
        3 if _ge(d.sleep_debt_hours, 2) else 2, 0.85,
        ["short_sleep", "late_screen"], [_sleep(d), _late_screen(d)],
    ),)


def _screen_time(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.SCREEN_TIME, TriggerType.ACTION,
        2 if _gt(d.late_screen_mins, 120) else 1, 0.8,
        ["late_screen>60"], [_late_screen(d)],
    ),)


def _sedentary_lifestyle(d: Drivers) -> tuple[Trigger, ...]:
    severe = _lt(d.avg_steps_7d, 3000) or _gt(d.sedentary_hours, 10)
    return (
        _trigger(
            Category.SEDENTARY_LIFESTYLE, TriggerType.INSIGHT,
            3 if severe else 2, 0.8,
            ["low_steps", "high_sedentary"], [_steps(d), _sedentary(d)],
        ),
        _trigger(
            Category.EXERCISE, TriggerType.ACTION, 2, 0.7,
            ["needs_activity"], ["Add +2000 steps today"],
        ),
    )


def _caffeine_load(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.CAFFEINE, TriggerType.ACTION,
        2 if _gt(d.caffeine_load_mg, 350) else 1, 0.8,
        ["caffeine>250mg"], [_caffeine(d)],
    ),)


def _migraine(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.MIGRAINE, TriggerType.ACTION, 2, 0.6,
        ["caffeine+sleep/screen"], [_caffeine(d), _sleep(d)],
    ),)


def _heart_rate(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.HEART_RATE, TriggerType.ALERT, 2, 0.7,
        ["rhr_up + stressors"], [_rhr(d), _sleep(d), _sedentary(d)],
    ),)


def _stress(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.STRESS, TriggerType.INSIGHT, 1, 0.6,
        ["rhr_up + recovery_needed"], ["Try 10m recovery walk"],
    ),)


def _air_quality(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.AIR_QUALITY, TriggerType.ALERT,
        2 if _between(d.aqi_level, 100, 150) else 3, 0.85,
        ["aqi>=100"], [_aqi(d)],
    ),)


def _allergies(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.ENVIRONMENTAL_ALLERGIES, TriggerType.ACTION, 1, 0.6,
        ["allergens_high"], ["Consider indoor time; shower after outdoor"],
    ),)


def _water_quality(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.WATER_QUALITY, TriggerType.ALERT, 3, 0.9,
        ["local_advisory"], ["Use filtered/bottled per local guidance"],
    ),)


def _hydration(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.HYDRATION, TriggerType.ACTION, 1, 0.55,
        ["caffeine_diuretic_proxy"], ["Add +1–2 cups water"],
    ),)


def _circadian(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.CIRCADIAN_DISRUPTION, TriggerType.ACTION, 1, 0.6,
        ["late_light + short_sleep"], ["Aim screen cutoff ≤23:00"],
    ),)


def _mood(d: Drivers) -> tuple[Trigger, ...]:
    return (
        _trigger(
            Category.MOOD, TriggerType.INSIGHT, 1, 0.6,
            ["mood_down + recovery_needed"], ["Try 10m sunlight walk"],
        ),
        _trigger(
            Category.ANXIETY, TriggerType.ACTION, 1, 0.5,
            ["mood_down + sleep"], ["2 min breathing tonight"],
        ),
        _trigger(
            Category.DEPRESSION, TriggerType.ACTION, 1, 0.5,
            ["mood_down + sedentary"], ["Text a friend / quick check-in"],
        ),
    )


def _weight(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.WEIGHT_MANAGEMENT, TriggerType.ACTION,
        2 if _ge(d.bmi, 30) else 1, 0.7,
        ["bmi + lifestyle"], [_bmi(d), _steps(d), _alcohol(d)],
    ),)


def _prediabetes(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.PREDIABETES, TriggerType.INSIGHT, 1, 0.6,
        ["bmi + famHx or lowSteps"], ["Favor 10–15m post-meal walk"],
    ),)


def _diabetes(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.DIABETES_TYPE_2, TriggerType.INSIGHT, 2, 0.55,
        ["clustered_risk_factors"], ["Smaller carb portion at dinner"],
    ),)


def _hypertension(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.HYPERTENSION, TriggerType.ACTION, 1, 0.6,
        ["bmi/family/sedentary"], ["Low-salt meal swap 1x"],
    ),)


def _alcohol_use(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.ALCOHOL_USE, TriggerType.ACTION,
        2 if _ge(d.alcohol_units_week, 14) else 1, 0.75,
        ["alcohol>=7/wk"], [_alcohol(d)],
    ),)


def _smoking(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.SMOKING, TriggerType.ACTION, 3, 0.9,
        ["smoking_current"], ["Explore a quit plan resource"],
    ),)


def _sleep_apnea(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.SLEEP_APNEA, TriggerType.INSIGHT, 1, 0.5,
        ["bmi + short_sleep"], ["Aim consistent bedtime this week"],
    ),)


def _social_isolation(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.SOCIAL_ISOLATION, TriggerType.ACTION, 1, 0.5,
        ["mood_down + low_steps"], ["Plan a 10m walk w/ a friend"],
    ),)


def _gerd(d: Drivers) -> tuple[Trigger, ...]:
    return (_trigger(
        Category.GERD, TriggerType.ACTION, 1, 0.55,
        ["late_meals + caffeine"], ["Avoid eating 2–3h before bed"],
    ),)


RULES: tuple[Rule, ...] = (
    Rule(
        "sleep_debt",
        lambda d: _ge(d.sleep_debt_hours, 1.5)
        or (_gt(d.late_screen_mins, 60) and _ge(d.sleep_debt_hours, 1)),
        _sleep_debt,
    ),
    Rule("screen_time", lambda d: _gt(d.late_screen_mins, 60), _screen_time),
    Rule(
        "sedentary_lifestyle",
        lambda d: _lt(d.avg_steps_7d, 5000) or _gt(d.sedentary_hours, 8),
        _sedentary_lifestyle,
    ),
    Rule("caffeine", lambda d: _gt(d.caffeine_load_mg, 250), _caffeine_load),
    Rule(
        "migraine",
        lambda d: _gt(d.caffeine_load_mg, 250)
        and (_gt(d.sleep_debt_hours, 1) or _gt(d.late_screen_mins, 60)),
        _migraine,
    ),
    Rule(
        "heart_rate",
        lambda d: d.resting_hr_trend == "up"
        and (_gt(d.sleep_debt_hours, 1) or _gt(d.sedentary_hours, 8)),
        _heart_rate,
    ),
    Rule(
        "stress",
        lambda d: d.resting_hr_trend == "up"
        and (_gt(d.sleep_debt_hours, 1) or _lt(d.avg_steps_7d, 5000)),
        _stress,
    ),
    Rule("air_quality", lambda d: _ge(d.aqi_level, 100), _air_quality),
    Rule(
        "environmental_allergies",
        lambda d: d.allergens_high_today and _ge(d.aqi_level, 80),
        _allergies,
    ),
    Rule("water_quality", lambda d: bool(d.water_advisory_flag), _water_quality),
    Rule("hydration", lambda d: _gt(d.caffeine_load_mg, 300), _hydration),
    Rule(
        "circadian_disruption",
        lambda d: _gt(d.late_screen_mins, 60) and _gt(d.sleep_debt_hours, 1),
        _circadian,
    ),
    Rule(
        "mood",
        lambda d: d.mood_trend == "down"
        and (_gt(d.sleep_debt_hours, 1) or _lt(d.avg_steps_7d, 5000)),
        _mood,
    ),
    Rule(
        "weight_management",
        lambda d: _ge(d.bmi, 27)
        and (_lt(d.avg_steps_7d, 7000) or _ge(d.alcohol_units_week, 6)),
        _weight,
    ),
    Rule(
        "prediabetes",
        lambda d: (_ge(d.bmi, 27) and _ge(d.fam_hx_diabetes, 1))
        or (_lt(d.avg_steps_7d, 5000) and _ge(d.bmi, 27)),
        _prediabetes,
    ),
    Rule(
        "diabetes_type_2",
        lambda d: _ge(d.bmi, 30) and _lt(d.avg_steps_7d, 5000) and _ge(d.fam_hx_diabetes, 1),
        _diabetes,
    ),
    Rule(
        "hypertension",
        lambda d: (_ge(d.bmi, 27) and _ge(d.fam_hx_hypertension, 1))
        or _gt(d.sedentary_hours, 8),
        _hypertension,
    ),
    Rule("alcohol_use", lambda d: _ge(d.alcohol_units_week, 7), _alcohol_use),
    Rule("smoking", lambda d: d.smoking_status == "current", _smoking),
    Rule(
        "sleep_apnea",
        lambda d: _ge(d.bmi, 30) and _gt(d.sleep_debt_hours, 1),
        _sleep_apnea,
    ),
    Rule(
        "social_isolation",
        lambda d: d.mood_trend == "down" and _lt(d.avg_steps_7d, 5000),
        _social_isolation,
    ),
    Rule(
        "gerd",
        lambda d: _ge(d.late_meals_per_week, 3) and _gt(d.caffeine_load_mg, 250),
        _gerd,
    ),
)


def evaluate_rules(drivers: Drivers, rules: tuple[Rule, ...] = RULES) -> list[Trigger]:
    """Run every rule in order and collect the triggers that fire."""
    out: list[Trigger] = []
    for rule in rules:
        if rule.condition(drivers):
            out.extend(rule.build(drivers))
    return out
