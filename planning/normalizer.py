"""
Plan normalizer.

Coerces whatever JSON the model returned into the canonical PlanShape.
Field names drift between model runs, so each lookup is an ordered list of
candidate keys and the plan array itself is located by ordered rules.

Guarantees:
- Never raises on malformed input
- A structurally empty result (no days, or a first day with no blocks) is
  replaced by the fixed fallback plan
- Optional move fields that are absent are omitted, never rendered as
  placeholders
"""

import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional

from planning.schemas import DAY_NAMES, PlanBlock, PlanDay, PlanShape

logger = logging.getLogger(__name__)

PlanRule = Callable[[Any], Optional[List[Any]]]

_KG_RE = re.compile(r"\b(\d+(?:\.\d+)?)\s?kgs?\b", re.IGNORECASE)
_KG_TO_LB = 2.20462

NAME_KEYS = ("name", "exercise", "move", "title")
SETS_KEYS = ("sets",)
REPS_KEYS = ("reps", "repetitions")
MINUTES_KEYS = ("time_min", "minutes", "duration_min", "durationMinutes")
SECONDS_KEYS = ("time_sec", "seconds", "duration_sec")
LOAD_KEYS = ("load_lb", "weight_lb", "load", "weight")

# Legacy {day, warmup, main, finisher, cooldown} sections, in render order
WEEK_SECTIONS = (("warmup", "Warm-up"), ("main", "Main"), ("finisher", "Finisher"), ("cooldown", "Cool-down"))


# ──────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────


def _kg_match_to_lb(match) -> str:
    pounds = float(match.group(1)) * _KG_TO_LB
    if not math.isfinite(pounds):
        return match.group(0)
    return f"{round(pounds)} lb"


def to_pounds(text: str) -> str:
    """Rewrite '20 kg' mentions as whole pounds."""
    return _KG_RE.sub(_kg_match_to_lb, text or "")


def _is_finite(value: Any) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


def _first(obj: Dict[str, Any], keys) -> Any:
    """First present value; NaN and infinities count as absent."""
    for key in keys:
        value = obj.get(key)
        if value is not None and value != "" and _is_finite(value):
            return value
    return None


def _fmt_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None


# ──────────────────────────────────────────────────────────────
# MOVES
# ──────────────────────────────────────────────────────────────


def render_move(move: Any) -> Optional[str]:
    """
    Render one exercise entry as a single descriptive string.

    Strings pass through. Objects render as
    "name — S x R" (or "— R reps"), "— duration", "— load lb[/side]",
    each clause only when its field is present.
    """
    if isinstance(move, str):
        text = move.strip()
        return to_pounds(text) if text else None
    if not isinstance(move, dict):
        return None

    parts = [str(_first(move, NAME_KEYS) or "Move")]

    sets = _first(move, SETS_KEYS)
    reps = _first(move, REPS_KEYS)
    if sets is not None and reps is not None:
        parts.append(f"— {_fmt_number(sets)} x {_fmt_number(reps)}")
    elif reps is not None:
        parts.append(f"— {_fmt_number(reps)} reps")

    minutes = _first(move, MINUTES_KEYS)
    seconds = _first(move, SECONDS_KEYS)
    duration = _first(move, ("duration",))
    if minutes is not None:
        parts.append(f"— {_fmt_number(minutes)} min")
    elif seconds is not None:
        parts.append(f"— {_fmt_number(seconds)} sec")
    elif isinstance(duration, str) and duration.strip():
        parts.append(f"— {duration.strip()}")
    elif isinstance(duration, (int, float)):
        parts.append(f"— {_fmt_number(duration)} min")

    load = _first(move, LOAD_KEYS)
    if load is not None and _as_int(load) is not None:
        side = "/side" if move.get("per_side") else ""
        parts.append(f"— {_fmt_number(load)} lb{side}")

    return to_pounds(" ".join(parts))


def normalize_moves(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        raw = [raw] if raw else []
    return [m for m in (render_move(item) for item in raw) if m]


# ──────────────────────────────────────────────────────────────
# BLOCKS / DAYS
# ──────────────────────────────────────────────────────────────


def normalize_block(raw: Any, index: int) -> Optional[PlanBlock]:
    if isinstance(raw, str):
        move = render_move(raw)
        return PlanBlock(name=f"Block {index + 1}", moves=[move]) if move else None
    if not isinstance(raw, dict):
        return None

    moves_raw = _first(raw, ("moves", "exercises", "items", "movements"))
    if moves_raw is None and _first(raw, ("exercise",) + SETS_KEYS + REPS_KEYS) is not None:
        # The block itself is a single exercise entry
        moves_raw = [raw]

    return PlanBlock(
        name=to_pounds(str(_first(raw, ("name", "title", "block", "focus")) or f"Block {index + 1}")),
        description=to_pounds(str(_first(raw, ("description", "notes", "details")) or "")),
        duration_minutes=_as_int(_first(raw, ("duration_min", "durationMinutes", "minutes", "duration"))),
        moves=normalize_moves(moves_raw),
    )


def _blocks_from_sections(raw: Dict[str, Any]) -> List[PlanBlock]:
    blocks = []
    for key, title in WEEK_SECTIONS:
        moves = normalize_moves(raw.get(key))
        if moves:
            blocks.append(PlanBlock(name=title, moves=moves))
    return blocks


def normalize_day(raw: Any, index: int) -> Optional[PlanDay]:
    if not isinstance(raw, dict):
        return None

    label = str(_first(raw, ("label", "day", "title", "name")) or f"Day {index + 1}")

    blocks_raw = _first(raw, ("blocks", "sessions", "workout"))
    if isinstance(blocks_raw, list):
        blocks = [b for b in (normalize_block(item, i) for i, item in enumerate(blocks_raw)) if b]
    else:
        blocks = _blocks_from_sections(raw)

    return PlanDay(label=to_pounds(label), blocks=blocks)


# ──────────────────────────────────────────────────────────────
# PLAN LOCATION RULES
# ──────────────────────────────────────────────────────────────


def _list_at(*path: str) -> PlanRule:
    def rule(doc: Any) -> Optional[List[Any]]:
        node = doc
        for key in path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node if isinstance(node, list) else None

    rule.__name__ = "list_at_" + "_".join(path)
    return rule


PLAN_RULES: List[PlanRule] = [
    _list_at("plan"),
    _list_at("days"),
    _list_at("week"),
    _list_at("data", "plan"),
    _list_at("data", "days"),
    _list_at("data", "week"),
]


def locate_plan(doc: Any, rules: List[PlanRule] = PLAN_RULES) -> Optional[List[Any]]:
    """First plan array matched by rules, or None."""
    if isinstance(doc, list):
        return doc
    for rule in rules:
        found = rule(doc)
        if found is not None:
            return found
    return None


def _benefits(doc: Any) -> str:
    if not isinstance(doc, dict):
        return ""
    for node in (doc, doc.get("data") if isinstance(doc.get("data"), dict) else {}):
        value = _first(node, ("benefitsSummary", "benefits", "summary"))
        if isinstance(value, str):
            return to_pounds(value)
    return ""


# ──────────────────────────────────────────────────────────────
# FALLBACK
# ──────────────────────────────────────────────────────────────


def fallback_plan(days: int = 3, minutes: int = 40, style: str = "hybrid", labels: Optional[List[str]] = None) -> PlanShape:
    """Deterministic, schema-valid default plan."""
    days = max(1, min(7, days))
    labels = (labels or [])[:days] or [DAY_NAMES[i % 7] for i in range(days)]
    main_minutes = max(10, minutes - 10)

    plan_days = [
        PlanDay(
            label=label,
            blocks=[
                PlanBlock(
                    name="Warm-up",
                    description="Raise temperature and open up hips and shoulders.",
                    duration_minutes=5,
                    moves=["Jumping Jacks — 2 min", "Dynamic Lunge — 10 reps"],
                ),
                PlanBlock(
                    name="Main",
                    description="Full-body circuit, rest 60-90 s between rounds.",
                    duration_minutes=main_minutes,
                    moves=["Air Squat — 3 x 20", "Push-up — 3 x 12", "Bent-over DB Row — 3 x 10 — 25 lb"],
                ),
                PlanBlock(
                    name="Cool-down",
                    description="Bring heart rate down.",
                    duration_minutes=5,
                    moves=["Walk — 3 min", "Stretch — 2 min"],
                ),
            ],
        )
        for label in labels
    ]
    return PlanShape(days=plan_days, benefits_summary=f"{style} plan • ~{minutes} min/session")


# ──────────────────────────────────────────────────────────────
# ENTRY POINT
# ──────────────────────────────────────────────────────────────


def normalize_plan(doc: Any, fallback: Optional[PlanShape] = None) -> PlanShape:
    """
    Coerce a parsed model document into PlanShape.

    Args:
        doc: Parsed JSON (dict or list); anything else yields the fallback
        fallback: Plan to return when the result is structurally empty

    Returns:
        Normalized PlanShape, or the fallback
    """
    fallback = fallback or fallback_plan()

    plan_raw = locate_plan(doc)
    if not plan_raw:
        logger.info("No recognizable plan array in model output, using fallback plan")
        return fallback

    days = [d for d in (normalize_day(item, i) for i, item in enumerate(plan_raw)) if d]
    plan = PlanShape(days=days, benefits_summary=_benefits(doc))

    if plan.is_empty():
        logger.info("Normalized plan is structurally empty, using fallback plan")
        return fallback
    return plan
