"""
ultra_tournament/registry.py - Battle system discovery and loading

Two sources:
  1. Built-ins (int, janken), registered when this module is imported
  2. [battle_systems.<name>] sections of config.toml, registered
     by load_from_config()
"""

import importlib
import logging
from dataclasses import dataclass
from typing import Any

from ultra_tournament.config import UltraTournamentConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class BattleSystemInfo:
    """Lightweight metadata from a built-in registration or config entry."""

    name: str
    display_name: str = ""
    description: str = ""
    entrant_type: str = ""

    # Loading
    entry_point: str | None = None  # "module.path:ClassName"
    source: str = "builtin"  # "builtin" | "config"


class BattleSystemNotFoundError(KeyError):
    """Raised when a battle system name is not in the registry."""


class BattleSystemLoadError(RuntimeError):
    """Raised when a battle system is found but can't be instantiated."""


# ============================================================================
# Registry State
# ============================================================================

_systems: dict[str, BattleSystemInfo] = {}
_builtin_classes: dict[str, type] = {}


# ============================================================================
# Public API
# ============================================================================


def register_builtin(name: str, system_class: type) -> None:
    """Register a built-in battle system class.

    Instantiates the class once to extract metadata for BattleSystemInfo,
    then discards the instance.
    """
    _builtin_classes[name] = system_class
    meta = system_class().metadata
    _systems[name] = BattleSystemInfo(
        name=name,
        display_name=meta.display_name,
        description=meta.description,
        entrant_type=meta.entrant_type,
        entry_point=f"{system_class.__module__}:{system_class.__qualname__}",
        source="builtin",
    )


def register_entry_point(name: str, entry_point: str, description: str = "") -> bool:
    """Register a battle system to be imported from 'module.path:ClassName'.

    Returns False (and keeps the existing entry) if name is a built-in.
    """
    existing = _systems.get(name)
    if existing is not None and existing.source == "builtin":
        logger.warning(
            "Battle system %r from config would replace a built-in; ignoring it",
            name,
        )
        return False

    _systems[name] = BattleSystemInfo(
        name=name,
        display_name=name,
        description=description,
        entry_point=entry_point,
        source="config",
    )
    return True


def load_from_config(config: UltraTournamentConfig) -> None:
    """Register every [battle_systems.*] entry from a loaded config."""
    for entry in config.battle_systems.values():
        register_entry_point(entry.name, entry.entry_point, entry.description)


def list_battle_systems() -> list[BattleSystemInfo]:
    """Return info for all registered battle systems."""
    return list(_systems.values())


def get_battle_system_info(name: str) -> BattleSystemInfo | None:
    """Get info for a battle system without instantiating it. Returns None if not found."""
    return _systems.get(name)


def load_battle_system(name: str, **kwargs: Any) -> Any:
    """Instantiate a battle system by name.

    Keyword arguments (e.g. seed) are passed to the constructor.

    Raises:
        BattleSystemNotFoundError: name not in registry
        BattleSystemLoadError: found but can't instantiate
    """
    info = _systems.get(name)
    if info is None:
        available = ", ".join(sorted(_systems.keys()))
        raise BattleSystemNotFoundError(f"Unknown battle system: {name!r}. Available: {available}")

    # Built-in: direct class instantiation
    if name in _builtin_classes:
        return _builtin_classes[name](**kwargs)

    if not info.entry_point:
        raise BattleSystemLoadError(f"Battle system {name!r} has no entry_point")

    cls = _import_entry_point(info.entry_point, name)

    try:
        return cls(**kwargs)
    except Exception as e:
        raise BattleSystemLoadError(
            f"Failed to instantiate {name!r} ({info.entry_point}): {e}"
        ) from e


def reset() -> None:
    """Clear all state. Intended for tests only."""
    _systems.clear()
    _builtin_classes.clear()
    _register_builtins()


# ============================================================================
# Internal
# ============================================================================


def _import_entry_point(entry_point: str, system_name: str) -> type:
    """Import a class from 'module.path:ClassName' string."""
    if ":" not in entry_point:
        raise BattleSystemLoadError(
            f"Invalid entry_point for {system_name!r}: {entry_point!r} "
            f"(expected 'module.path:ClassName')"
        )

    module_path, class_name = entry_point.rsplit(":", 1)

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise BattleSystemLoadError(
            f"Cannot import module {module_path!r} for battle system {system_name!r}: {e}"
        ) from e

    cls = getattr(module, class_name, None)
    if cls is None:
        raise BattleSystemLoadError(
            f"Module {module_path!r} has no attribute {class_name!r} "
            f"(battle system {system_name!r})"
        )

    return cls


def _register_builtins() -> None:
    """Register built-in battle systems. Called at module load."""
    from ultra_tournament.battle import IntBattleSystem, JankenBattleSystem

    register_builtin("int", IntBattleSystem)
    register_builtin("janken", JankenBattleSystem)


# Register built-ins on import
_register_builtins()
