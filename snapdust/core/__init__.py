"""
SnapDust - Core
"""

from .utils import Vec2, MathUtils
from .errors import (
    SnapError, SnapConfigError, CaptureNotReadyError, AnimationInProgressError,
)
from .parser import SpriteParser, Sprite
from .easing import (
    linear, ease_out, get_easing,
    BezierCurve, EASE, EASE_IN, EASE_OUT, EASE_IN_OUT, DECELERATE,
    EASING_FUNCTIONS,
)
from .decompose import (
    # Layers
    DustLayer, LayerSet,
    # Weights & sampling
    gauss_weight, bucket_weights, pick_bucket,
    # Decomposer
    SnapDecomposer, decompose_sprite,
)
from .animator import (
    AnimationStatus, AnimationClock, LayerState, LayerAnimator,
    SINGLE_LAYER_ANIMATION_LENGTH, LAST_LAYER_ANIMATION_START,
    layer_interval, layer_progress, layer_opacity, layer_offset,
)
from .compositor import canvas_margin, render_frame
from .exporter import SpriteExporter
from .config import SnapConfig
from .presets import (
    SnapPreset, PresetManager, BUILTIN_PRESETS,
    get_preset_manager, get_preset, list_presets, save_preset,
)
from .snappable import Snappable, SnapJob, build_layers
from .preview import PreviewConfig, SnapPreviewWindow, preview_snap, check_pygame_available

__all__ = [
    'Vec2', 'MathUtils',
    'SnapError', 'SnapConfigError', 'CaptureNotReadyError', 'AnimationInProgressError',
    'SpriteParser', 'Sprite',
    # Easing
    'linear', 'ease_out', 'get_easing',
    'BezierCurve', 'EASE', 'EASE_IN', 'EASE_OUT', 'EASE_IN_OUT', 'DECELERATE',
    'EASING_FUNCTIONS',
    # Decomposition
    'DustLayer', 'LayerSet',
    'gauss_weight', 'bucket_weights', 'pick_bucket',
    'SnapDecomposer', 'decompose_sprite',
    # Animation
    'AnimationStatus', 'AnimationClock', 'LayerState', 'LayerAnimator',
    'SINGLE_LAYER_ANIMATION_LENGTH', 'LAST_LAYER_ANIMATION_START',
    'layer_interval', 'layer_progress', 'layer_opacity', 'layer_offset',
    # Rendering & export
    'canvas_margin', 'render_frame',
    'SpriteExporter',
    # Configuration
    'SnapConfig',
    'SnapPreset', 'PresetManager', 'BUILTIN_PRESETS',
    'get_preset_manager', 'get_preset', 'list_presets', 'save_preset',
    # Controller
    'Snappable', 'SnapJob', 'build_layers',
    # Preview
    'PreviewConfig', 'SnapPreviewWindow', 'preview_snap', 'check_pygame_available',
]
