"""Runtime settings, read from the environment.

    UTTT_MOVE_LIMIT        move ceiling before a forced draw ("none" disables)
    UTTT_DIFFICULTY        default bot difficulty (easy / medium / hard)
    UTTT_DEPTH_EASY        search depth overrides per tier
    UTTT_DEPTH_MEDIUM
    UTTT_DEPTH_HARD
    UTTT_EASY_RANDOM_RATE  chance that easy plays a random move
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .ai import DIFFICULTIES
from .board import DEFAULT_MOVE_LIMIT


def _parse_limit(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return DEFAULT_MOVE_LIMIT
    if raw.strip().lower() in ("none", "off", "0"):
        return None
    limit = int(raw)
    if limit < 0:
        raise ValueError(f"UTTT_MOVE_LIMIT must be positive, got {raw!r}")
    return limit


@dataclass
class Settings:
    move_limit: Optional[int] = DEFAULT_MOVE_LIMIT
    difficulty: str = "medium"
    depths: Dict[str, int] = field(default_factory=lambda: {n: t.depth for n, t in DIFFICULTIES.items()})
    easy_random_rate: float = DIFFICULTIES["easy"].random_rate

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        difficulty = env.get("UTTT_DIFFICULTY", "medium").strip().lower()
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"UTTT_DIFFICULTY must be one of {sorted(DIFFICULTIES)}, got {difficulty!r}")
        depths = {}
        for name, tier in DIFFICULTIES.items():
            depth = int(env.get(f"UTTT_DEPTH_{name.upper()}", tier.depth))
            if depth < 1:
                raise ValueError(f"UTTT_DEPTH_{name.upper()} must be at least 1")
            depths[name] = depth
        rate = float(env.get("UTTT_EASY_RANDOM_RATE", DIFFICULTIES["easy"].random_rate))
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"UTTT_EASY_RANDOM_RATE must be within [0, 1], got {rate}")
        return cls(
            move_limit=_parse_limit(env.get("UTTT_MOVE_LIMIT")),
            difficulty=difficulty,
            depths=depths,
            easy_random_rate=rate,
        )
