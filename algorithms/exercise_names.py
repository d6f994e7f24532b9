import re
from types import MappingProxyType

# Vendor and equipment prefixes that do not change which standard applies.
_PREFIX_RE = re.compile(r"^(?:(?:egym|machine)\s+)+")
_PARENS_RE = re.compile(r"[()]")
_SPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\w\S*")

LIFT_NAME_ALIASES = MappingProxyType(
    {
        "lat pull": "lat pulldown",
        "lat pull down": "lat pulldown",
        "biceps curl": "bicep curl",
        "reverse fly": "reverse flys",
        "reverse flies": "reverse flys",
        "rear delt fly": "reverse flys",
        "tricep extension": "triceps",
        "tricep pushdown": "triceps",
        "triceps extension": "triceps",
        "triceps pushdown": "triceps",
        "seated dip": "triceps",
        "squats": "squat",
        "back squat": "squat",
        "row": "seated row",
        "rows": "seated row",
        "cable row": "seated row",
        "seated cable row": "seated row",
        "barbell bench press": "bench press",
        "flat bench press": "bench press",
        "military press": "overhead press",
        "pec fly": "butterfly",
        "pec deck": "butterfly",
        "hamstring curl": "leg curl",
        "seated leg curl": "leg curl",
        "quad extension": "leg extension",
        "hip adduction": "adductor",
        "hip abduction": "abductor",
        # plural/singular variations
        "abdominal crunches": "abdominal crunch",
        "abductors": "abductor",
        "adductors": "adductor",
        "back extensions": "back extension",
        "bench presses": "bench press",
        "bicep curls": "bicep curl",
        "biceps curls": "bicep curl",
        "butterflies": "butterfly",
        "chest presses": "chest press",
        "hip thrusts": "hip thrust",
        "lat pulldowns": "lat pulldown",
        "leg curls": "leg curl",
        "leg extensions": "leg extension",
        "leg presses": "leg press",
        "overhead presses": "overhead press",
        "rotary torsos": "rotary torso",
        "seated rows": "seated row",
        "shoulder presses": "shoulder press",
        # equipment shorthand
        "db": "dumbbell",
        "dbs": "dumbbell",
        "bb": "barbell",
        "bbs": "barbell",
        "cable glute kickbacks": "cable glute kickback",
        "bulgarian split squats": "bulgarian split squat",
    }
)


def _clean(name: str) -> str:
    value = _PARENS_RE.sub("", name.lower())
    value = _SPACE_RE.sub(" ", value).strip()
    return _PREFIX_RE.sub("", value)


def normalize_exercise_name(name: str | None) -> str:
    """Return the canonical lookup key for ``name``.

    The result is lower case with parentheses removed, whitespace collapsed,
    leading ``egym``/``machine`` prefixes dropped and known aliases resolved.
    Applying it twice gives the same key as applying it once.
    """
    if not name:
        return ""
    cleaned = _clean(name)
    return LIFT_NAME_ALIASES.get(cleaned, cleaned)


def title_case(value: str | None) -> str:
    """Capitalize every word of ``value`` for display."""
    if not value:
        return ""
    return _WORD_RE.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), value)
