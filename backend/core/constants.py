"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any business rule that references a numeric constant or a fixed piece of
copy should import it from here instead of hardcoding.  This avoids drift
between the service layer, serializers and tests.
"""

# ── Case lifecycle ──────────────────────────────────────────────────
# Maximum length of the instructions a responder can push to the owner.
INSTRUCTIONS_MAX_LENGTH: int = 500

# Advice shown to the owner as soon as a responder claims the case.
DEFAULT_REVIEWING_ADVICE: str = "A responder is reviewing your case..."

# ── Ranking ─────────────────────────────────────────────────────────
LEADERBOARD_SIZE: int = 20

# ── Geo ─────────────────────────────────────────────────────────────
EARTH_RADIUS_KM: float = 6371.0

# ── Push notifications ──────────────────────────────────────────────
# Truncation applied to symptom text embedded in push bodies.
PUSH_SYMPTOM_PREVIEW_CHARS: int = 30
PUSH_ESCALATION_PREVIEW_CHARS: int = 40
