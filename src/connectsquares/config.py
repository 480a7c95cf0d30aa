"""Arena configuration loader."""

import yaml
from dataclasses import dataclass, field
from pathlib import Path

from connectsquares.game.turn_clock import TURN_TIMEOUT


class ConfigError(ValueError):
    """Raised when a config file is structurally wrong."""


@dataclass
class RulesConfig:
    """Defaults for matches created without explicit parameters."""

    rows: int = 6
    cols: int = 7
    connect: int = 4
    min_players: int = 2
    max_players: int = 2
    wager: int = 100
    turn_timeout_ticks: int = TURN_TIMEOUT
    deathmatch: bool = True  # False ends a full board in a tie


@dataclass
class TelemetryConfig:
    output_dir: Path | None = None  # None disables JSONL telemetry


@dataclass
class ArenaConfig:
    name: str = "local"
    treasury: str = "treasury"  # holder that receives payout remainders
    slot_ms: int = 400
    rules: RulesConfig = field(default_factory=RulesConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)


def load_config(path: Path) -> ArenaConfig:
    """Load arena config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    a = _section(raw, "arena")
    r = _section(raw, "rules")
    t = _section(raw, "telemetry")

    defaults = RulesConfig()
    rules = RulesConfig(
        rows=r.get("rows", defaults.rows),
        cols=r.get("cols", defaults.cols),
        connect=r.get("connect", defaults.connect),
        min_players=r.get("min_players", defaults.min_players),
        max_players=r.get("max_players", defaults.max_players),
        wager=r.get("wager", defaults.wager),
        turn_timeout_ticks=r.get("turn_timeout_ticks", defaults.turn_timeout_ticks),
        deathmatch=r.get("deathmatch", defaults.deathmatch),
    )
    if not isinstance(rules.turn_timeout_ticks, int) or rules.turn_timeout_ticks <= 0:
        raise ConfigError(
            f"rules.turn_timeout_ticks must be a positive integer, got {rules.turn_timeout_ticks!r}"
        )

    output_dir = t.get("output_dir")
    return ArenaConfig(
        name=a.get("name", "local"),
        treasury=a.get("treasury", "treasury"),
        slot_ms=a.get("slot_ms", 400),
        rules=rules,
        telemetry=TelemetryConfig(
            output_dir=Path(output_dir) if output_dir else None,
        ),
    )


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"section {name!r} must be a mapping")
    return section
