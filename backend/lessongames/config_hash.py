"""Rule-config hash shared by telemetry and the spin audit script.

The hash MUST be computed identically in both locations so an audit CSV
can be matched against the telemetry of the server that produced it.
"""
import hashlib
import json

from lessongames.config import settings


def get_config_hash() -> str:
    """
    Hash the rule-relevant settings.

    Returns 16-char hex hash of config snapshot.
    Used for:
    - spin_audit CSV config_hash column
    - spin_resolved telemetry event config_hash field
    """
    config_snapshot = {
        "spin_duration_ms": settings.spin_duration_ms,
        "extra_spins": [settings.extra_spins_min, settings.extra_spins_max],
        "jitter_fraction": settings.jitter_fraction,
        "completion_bonus": settings.completion_bonus,
        "solve_reward": settings.solve_reward,
        "solve_penalty": settings.solve_penalty,
        "double_per_letter": settings.double_per_letter,
        "bonus_per_letter": settings.bonus_per_letter,
        "bonus_extra": settings.bonus_extra,
        "hint_budgets": [settings.letter_hint_budget, settings.context_hint_budget],
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
