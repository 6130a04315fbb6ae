"""Prompt construction for AI meal recommendations.

Everything here is pure text rendering: no network or storage access.
Optional profile fields are rendered as an explicit ``not set`` marker so
that missing data is visible to the model instead of silently omitted.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from diet_journal.domain.meals import (
    DEFAULT_REGION_TIMEZONE,
    HISTORY_DAYS,
    MEAL_SLOT_LABELS,
    MealRecord,
    MealSlot,
    parse_meal_slot,
)
from diet_journal.domain.profiles import ACTIVITY_LEVEL_LABELS, UserProfile

NOT_SET = "not set"
NONE_MARKER = "none"
EXCLUSION_NOTE = "must not be included"
NO_HISTORY_TEXT = (
    "No historical records yet: no meals were logged in the history window. "
    "Base the analysis on the profile only and suggest logging more meals."
)
NO_MEALS_TODAY_TEXT = "No meals logged today yet."

REGION_TZ = ZoneInfo(DEFAULT_REGION_TIMEZONE)


def build_profile_section(profile: UserProfile) -> str:
    """Render the user profile, restrictions and allergies."""
    activity = (
        ACTIVITY_LEVEL_LABELS[profile.activity_level]
        if profile.activity_level is not None
        else NOT_SET
    )
    lines = [
        "## User profile",
        "",
        f"Name: {profile.display_name or NOT_SET}",
        f"Height: {_measure(profile.height, 'cm')}",
        f"Weight: {_measure(profile.weight, 'kg')}",
        f"Activity level: {activity}",
        f"Daily calorie target: {_measure(profile.daily_calorie_target, 'kcal')}",
        "",
        "### Diet goals",
        _bullets(profile.diet_goals, empty=NOT_SET),
        "",
        "### Dietary restrictions (strict: never recommend anything that breaks them)",
        _bullets(profile.dietary_restrictions, empty=NONE_MARKER, note=EXCLUSION_NOTE),
        "",
        "### Allergies (strict: avoid these foods completely)",
        _bullets(profile.allergies, empty=NONE_MARKER, note=EXCLUSION_NOTE),
    ]
    return "\n".join(lines)


def group_by_date(
    records: Iterable[MealRecord], tz: ZoneInfo = REGION_TZ
) -> dict[str, list[MealRecord]]:
    """Group records by regional calendar date.

    Dates keep the order in which they first appear in ``records``; meals
    within a date are sorted chronologically.
    """
    grouped: dict[str, list[MealRecord]] = {}
    for record in records:
        label = _local(record.eaten_at, tz).strftime("%Y-%m-%d")
        grouped.setdefault(label, []).append(record)
    return {
        label: sorted(day, key=lambda record: record.eaten_at)
        for label, day in grouped.items()
    }


def group_by_slot(records: Iterable[MealRecord]) -> dict[MealSlot, list[MealRecord]]:
    """Group records by meal slot in canonical slot order."""
    grouped: dict[MealSlot, list[MealRecord]] = {}
    for record in records:
        grouped.setdefault(parse_meal_slot(record.meal_slot), []).append(record)
    return {
        slot: sorted(grouped[slot], key=lambda record: record.eaten_at)
        for slot in MealSlot
        if slot in grouped
    }


def build_history_coverage(
    recent_meals: list[MealRecord], tz: ZoneInfo = REGION_TZ
) -> str:
    """State how many distinct days the history actually covers."""
    days = len(group_by_date(recent_meals, tz))
    line = (
        f"Days with records: {days} of {HISTORY_DAYS} "
        f"({len(recent_meals)} meals in total)."
    )
    if days < HISTORY_DAYS:
        line += (
            " The history is incomplete; judge trends only from the days shown"
            " and do not invent meals for the missing days."
        )
    return line


def build_history_section(
    recent_meals: list[MealRecord], tz: ZoneInfo = REGION_TZ
) -> str:
    """Render the historical meals grouped by date."""
    if not recent_meals:
        return f"## Meal history\n\n{NO_HISTORY_TEXT}"

    lines = ["## Meal history", ""]
    for label, day in group_by_date(recent_meals, tz).items():
        lines.extend([f"### {label}", ""])
        for record in day:
            lines.append(
                f"**{_slot_label(record.meal_slot)}** {_clock(record.eaten_at, tz)}"
            )
            lines.append(f"- Description: {record.description or NONE_MARKER}")
            lines.append("")
    return "\n".join(lines).rstrip()


def build_today_section(
    todays_meals: list[MealRecord], tz: ZoneInfo = REGION_TZ
) -> str:
    """Render today's meals grouped by slot."""
    if not todays_meals:
        return f"## Today's meals\n\n{NO_MEALS_TODAY_TEXT}"

    lines = ["## Today's meals", "", f"*{len(todays_meals)} meals logged today.*", ""]
    for slot, meals in group_by_slot(todays_meals).items():
        lines.extend([f"### {MEAL_SLOT_LABELS[slot]}", ""])
        for record in meals:
            lines.append(
                f"- {_clock(record.eaten_at, tz)}: "
                f"{record.description or 'no description'}"
            )
            if record.price > 0:
                lines.append(f"  Price: {record.price:.2f}")
            if record.location:
                lines.append(f"  Location: {record.location}")
            if record.tags:
                lines.append(f"  Tags: {', '.join(record.tags)}")
            lines.append("")
    return "\n".join(lines).rstrip()


def build_recommendation_prompt(
    profile: UserProfile,
    recent_meals: list[MealRecord],
    todays_meals: list[MealRecord],
    target_slot: MealSlot | str,
    tz: ZoneInfo = REGION_TZ,
) -> str:
    """Compose the full meal recommendation prompt."""
    slot_label = MEAL_SLOT_LABELS[parse_meal_slot(target_slot)]
    sections = [
        build_profile_section(profile),
        build_history_coverage(recent_meals, tz),
        build_history_section(recent_meals, tz),
        build_today_section(todays_meals, tz),
        _RECOMMENDATION_REQUEST.format(slot=slot_label, slot_lower=slot_label.lower()),
    ]
    return "\n\n".join(sections)


def build_today_summary_prompt(
    profile: UserProfile,
    todays_meals: list[MealRecord],
    tz: ZoneInfo = REGION_TZ,
) -> str:
    """Compose the end-of-day summary prompt."""
    sections = [
        build_profile_section(profile),
        build_today_section(todays_meals, tz),
        _TODAY_SUMMARY_REQUEST,
    ]
    return "\n\n".join(sections)


def _measure(value: float | None, unit: str) -> str:
    if value is None:
        return NOT_SET
    return f"{value:g} {unit}"


def _bullets(items: tuple[str, ...], empty: str, note: str | None = None) -> str:
    if not items:
        return f"- {empty}"
    suffix = f" ({note})" if note else ""
    return "\n".join(f"- {item}{suffix}" for item in items)


def _local(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(tz)


def _clock(value: datetime, tz: ZoneInfo) -> str:
    return _local(value, tz).strftime("%H:%M")


def _slot_label(slot: MealSlot | str) -> str:
    return MEAL_SLOT_LABELS[parse_meal_slot(slot)]


_RECOMMENDATION_REQUEST = """## Recommendation request

You are a professional dietitian who designs practical, healthy fat-loss meal plans.

Using my meal history, calorie trend, nutritional balance and goals, recommend a concrete dish for **today's {slot_lower}**.

**Pay particular attention to "Today's meals" and adjust the recommendation to what I have already eaten today.**

## Output structure

### Part 1: Nutrition summary
- Summarize what I have eaten today and estimate the calories already consumed
- Assess protein, carbohydrate and fat intake so far
- Briefly analyse the history above; if it covers only a few days, say so and keep conclusions modest

### Part 2: {slot} recommendation

**Recommended dish**: ...

**Main ingredients**:
- Staple: ...
- Protein: ...
- Vegetables: ...

**Nutrition breakdown**:
- Calories: about ... kcal
- Protein: about ... g
- Carbohydrates: about ... g
- Fat: about ... g

**Highlights**: ...

### Part 3: Tips
- 2-3 practical, actionable suggestions
- Anything I should watch out for

## Constraints
- Respect every dietary restriction and allergy listed above exactly as written; never include those foods
- Prefer common ingredients that are easy to buy, or dishes available from a canteen or takeaway
- Avoid high-sugar, high-oil and ultra-processed foods
- Keep the day's total calories in line with my goals
- If information is missing (for example height or weight is not set), say so explicitly
- Answer in Markdown"""

_TODAY_SUMMARY_REQUEST = """## Daily summary request

You are a professional dietitian who reviews food diaries and gives health advice.

Summarize my meals for today using the structure below.

### Part 1: Overview
- How many meals were logged and what they were (time, description, price, location, tags)

### Part 2: Calories
- Estimated total calories today, compared with my daily target if one is set

### Part 3: Nutrition
- Protein, carbohydrate and fat intake and how balanced it was

### Part 4: Evaluation
- What went well today and what did not, relative to my goals

### Part 5: Suggestions
- 2-3 concrete improvements and food pairings to try tomorrow

## Constraints
- If nothing was logged today, say so clearly and suggest starting to log meals
- Respect every dietary restriction and allergy listed above
- Answer in Markdown"""
