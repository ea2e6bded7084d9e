"""
Snap Presets Library - Named effect configurations
Built-in looks plus user presets stored as YAML files
"""

import logging

import yaml
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field, asdict

from .config import SnapConfig
from .errors import SnapConfigError
from .utils import Vec2

logger = logging.getLogger(__name__)


# ============================================================================
# Preset Data Structures
# ============================================================================

@dataclass
class SnapPreset:
    """A single snap preset configuration"""

    name: str
    description: str = ""

    # Motion
    offset: Tuple[float, float] = (64.0, -32.0)
    random_dislocation: Tuple[float, float] = (64.0, 32.0)

    # Timing
    duration_ms: float = 5000
    grace_ms: float = 100
    easing: str = "ease_out"

    # Decomposition
    bucket_count: int = 16

    # Interaction / output
    snap_on_tap: bool = False
    fps: int = 30

    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dictionary for YAML serialization"""
        data = asdict(self)
        data['offset'] = list(self.offset)
        data['random_dislocation'] = list(self.random_dislocation)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnapPreset':
        """Create from dictionary; unknown keys are ignored"""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}

        if 'name' not in filtered:
            raise SnapConfigError("Preset needs a name")

        for key in ('offset', 'random_dislocation'):
            if key in filtered:
                value = filtered[key]
                if not isinstance(value, (list, tuple)) or len(value) != 2:
                    raise SnapConfigError(f"Preset field '{key}' must be a pair [x, y]")
                filtered[key] = (float(value[0]), float(value[1]))

        return cls(**filtered)

    def to_config(
        self,
        on_snapped: Callable[[], None],
        seed: Optional[int] = None,
        **overrides
    ) -> SnapConfig:
        """Build the immutable effect configuration for this preset"""
        settings = dict(
            on_snapped=on_snapped,
            offset=Vec2(*self.offset),
            duration_ms=self.duration_ms,
            random_dislocation=Vec2(*self.random_dislocation),
            bucket_count=self.bucket_count,
            snap_on_tap=self.snap_on_tap,
            grace_ms=self.grace_ms,
            easing=self.easing,
            seed=seed,
        )
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return SnapConfig(**settings)


# ============================================================================
# Built-in Presets
# ============================================================================

BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    "thanos": {
        "name": "thanos",
        "description": "The classic snap: dust drifts up and to the right over five seconds",
        "tags": ["classic", "default"],
    },

    "gentle_drift": {
        "name": "gentle_drift",
        "description": "Slow, soft fade with a short drift",
        "easing": "ease_in_out",
        "offset": [24, -12],
        "random_dislocation": [16, 8],
        "duration_ms": 8000,
        "bucket_count": 24,
        "tags": ["subtle", "slow"],
    },

    "shatter": {
        "name": "shatter",
        "description": "Few heavy shards flung far in a hurry",
        "easing": "decelerate",
        "offset": [96, 48],
        "random_dislocation": [128, 96],
        "duration_ms": 1800,
        "bucket_count": 6,
        "tags": ["fast", "violent"],
    },

    "ember_rise": {
        "name": "ember_rise",
        "description": "Fine dust floating straight up like embers",
        "offset": [0, -96],
        "random_dislocation": [24, 24],
        "duration_ms": 4000,
        "bucket_count": 32,
        "tags": ["fire", "vertical"],
    },

    "quick_poof": {
        "name": "quick_poof",
        "description": "UI-friendly sub-second vanish, triggered by tap",
        "offset": [32, -16],
        "random_dislocation": [32, 16],
        "duration_ms": 900,
        "grace_ms": 0,
        "bucket_count": 8,
        "snap_on_tap": True,
        "fps": 60,
        "tags": ["ui", "fast"],
    },
}


# ============================================================================
# Preset Manager
# ============================================================================

class PresetManager:
    """
    Manages loading and saving snap presets.
    """

    def __init__(self, user_presets_dir: Optional[Path] = None):
        """
        Initialize preset manager.

        Args:
            user_presets_dir: Directory for user presets (default: ~/.snapdust/presets)
        """
        self.user_presets_dir = Path(user_presets_dir) if user_presets_dir else \
            Path.home() / '.snapdust' / 'presets'

        self._builtin: Dict[str, SnapPreset] = {}
        self._user: Dict[str, SnapPreset] = {}

        self._load_builtin_presets()
        self._load_user_presets()

    def _load_builtin_presets(self) -> None:
        for name, data in BUILTIN_PRESETS.items():
            self._builtin[name] = SnapPreset.from_dict(data)

    def _load_user_presets(self) -> None:
        """Load user-defined presets from YAML files"""
        if not self.user_presets_dir.is_dir():
            return

        for yaml_file in sorted(self.user_presets_dir.glob('*.yaml')):
            try:
                with open(yaml_file, 'r') as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Could not load preset file %s: %s", yaml_file, e)
                continue

            if not isinstance(data, dict):
                logger.warning("Ignoring preset file %s: not a mapping", yaml_file)
                continue

            # Multiple presets in one file or a single one named after the file
            if 'presets' not in data:
                entries = [(yaml_file.stem, data)]
            elif isinstance(data['presets'], dict):
                entries = data['presets'].items()
            else:
                logger.warning("Ignoring preset file %s: 'presets' must map names to presets", yaml_file)
                continue

            for name, preset_data in entries:
                try:
                    self._user[name] = SnapPreset.from_dict({**preset_data, 'name': name})
                except (SnapConfigError, TypeError, ValueError) as e:
                    logger.warning("Invalid preset '%s' in %s: %s", name, yaml_file, e)

    def get(self, name: str) -> Optional[SnapPreset]:
        """
        Get a preset by name.
        User presets override built-in presets with same name.
        """
        return self._user.get(name) or self._builtin.get(name)

    def exists(self, name: str) -> bool:
        return name in self._user or name in self._builtin

    def list_all(self) -> List[str]:
        return sorted(set(self._builtin) | set(self._user))

    def list_by_tag(self, tag: str) -> List[str]:
        matches = []
        for name, preset in {**self._builtin, **self._user}.items():
            if tag.lower() in [t.lower() for t in preset.tags]:
                matches.append(name)
        return sorted(matches)

    def is_builtin(self, name: str) -> bool:
        return name in self._builtin and name not in self._user

    def save_preset(self, preset: SnapPreset, filename: Optional[str] = None) -> Path:
        """
        Save a user preset to YAML file.

        Returns:
            Path to saved file
        """
        filename = filename or f"{preset.name}.yaml"
        if not filename.endswith('.yaml'):
            filename += '.yaml'

        self.user_presets_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.user_presets_dir / filename

        with open(filepath, 'w') as f:
            yaml.dump(preset.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._user[preset.name] = preset
        logger.debug("Saved preset %s to %s", preset.name, filepath)

        return filepath


# ============================================================================
# Global Instance & Convenience Functions
# ============================================================================

_manager: Optional[PresetManager] = None


def get_preset_manager() -> PresetManager:
    """Get or create global preset manager"""
    global _manager
    if _manager is None:
        _manager = PresetManager()
    return _manager


def get_preset(name: str) -> Optional[SnapPreset]:
    """Get a preset by name"""
    return get_preset_manager().get(name)


def list_presets(tag: Optional[str] = None) -> List[str]:
    """List available presets, optionally filtered by tag"""
    manager = get_preset_manager()
    if tag:
        return manager.list_by_tag(tag)
    return manager.list_all()


def save_preset(preset: SnapPreset) -> Path:
    """Save a user preset"""
    return get_preset_manager().save_preset(preset)
