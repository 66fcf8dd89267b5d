"""
ultra_tournament/config.py - Local configuration management

Reads user config from a platform-appropriate config directory:
  - macOS/Linux: ~/.ultra_tournament/config.toml
  - Windows: %APPDATA%\\ultra_tournament\\config.toml

Only the CLI reads this file. The library itself takes everything as
arguments.

Example:
    [tournament]
    battle_system = "janken"
    entrants = 32
    seed = 7

    [logging]
    level = "DEBUG"

    [battle_systems.hp]
    entry_point = "my_game.battles:HealthBattleSystem"
    description = "Fighters keep their damage between rounds"
"""

import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================


def _get_config_dir() -> Path:
    """Get platform-appropriate config directory."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "ultra_tournament"
    return Path.home() / ".ultra_tournament"


CONFIG_DIR = _get_config_dir()
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_BATTLE_SYSTEM = "int"
DEFAULT_ENTRANTS = 16
DEFAULT_LOG_LEVEL = "INFO"


# ============================================================================
# Data Types
# ============================================================================

@dataclass
class TournamentDefaults:
    """Defaults for `ultra-tournament run`."""

    battle_system: str = DEFAULT_BATTLE_SYSTEM
    entrants: int = DEFAULT_ENTRANTS
    seed: int | None = None


@dataclass
class BattleSystemEntry:
    """A user battle system loaded from an entry point."""

    name: str
    entry_point: str
    description: str = ""


@dataclass
class UltraTournamentConfig:
    """Top-level configuration."""

    tournament: TournamentDefaults = field(default_factory=TournamentDefaults)
    log_level: str = DEFAULT_LOG_LEVEL
    battle_systems: dict[str, BattleSystemEntry] = field(default_factory=dict)


# ============================================================================
# Parsing
# ============================================================================

def _parse_tournament(data: dict) -> TournamentDefaults:
    """Parse the [tournament] section, keeping defaults for bad values."""
    defaults = TournamentDefaults()

    entrants = data.get("entrants", defaults.entrants)
    if not isinstance(entrants, int) or entrants < 1:
        logger.warning(f"Ignoring invalid [tournament] entrants = {entrants!r}")
        entrants = defaults.entrants

    seed = data.get("seed")
    if seed is not None and not isinstance(seed, int):
        logger.warning(f"Ignoring invalid [tournament] seed = {seed!r}")
        seed = None

    return TournamentDefaults(
        battle_system=data.get("battle_system", defaults.battle_system),
        entrants=entrants,
        seed=seed,
    )


def _parse_battle_systems(data: dict) -> dict[str, BattleSystemEntry]:
    """Parse [battle_systems.<name>] sections. Entries without an entry_point are skipped."""
    entries = {}
    for name, section in data.items():
        if not isinstance(section, dict):
            continue
        entry_point = section.get("entry_point")
        if not entry_point:
            logger.warning(f"Skipping battle system {name!r}: missing entry_point")
            continue
        entries[name] = BattleSystemEntry(
            name=name,
            entry_point=entry_point,
            description=section.get("description", ""),
        )
    return entries


def load_config(path: Path | None = None) -> UltraTournamentConfig:
    """
    Read config from TOML file.

    Args:
        path: Override config file path (default: ~/.ultra_tournament/config.toml)

    Returns:
        UltraTournamentConfig. Missing file or bad TOML returns defaults.
    """
    config_path = path or CONFIG_PATH

    if not config_path.exists():
        return UltraTournamentConfig()

    try:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return UltraTournamentConfig()

    # Parse [tournament] section
    tournament_data = raw.get("tournament", {})
    tournament = _parse_tournament(tournament_data if isinstance(tournament_data, dict) else {})

    # Parse [logging] section
    logging_data = raw.get("logging", {})
    log_level = DEFAULT_LOG_LEVEL
    if isinstance(logging_data, dict):
        log_level = str(logging_data.get("level", DEFAULT_LOG_LEVEL)).upper()

    # Parse [battle_systems.*] sections
    systems_data = raw.get("battle_systems", {})
    battle_systems = _parse_battle_systems(systems_data if isinstance(systems_data, dict) else {})

    return UltraTournamentConfig(
        tournament=tournament,
        log_level=log_level,
        battle_systems=battle_systems,
    )
