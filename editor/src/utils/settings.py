"""Engine settings persisted as JSON.

Missing file gives defaults; unknown keys are ignored so older or newer
config files still load.
"""
import os
import json
import logging
from dataclasses import dataclass, field, asdict, fields

from models.viewport import ZoomConfig, ElasticBoundsConfig, InertiaConfig
from utils.logger import loggerRaise
from constants import (
    DEFAULT_GRID_SIZE, DEFAULT_SNAP_THRESHOLD, FIT_MARGIN, MIN_ZOOM_PADDING,
    TRANSFORM_HANDLE_SIZE, CONFIG_DIR_NAME, CONFIG_FILE_NAME,
)

logger = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """User-tunable engine behaviour"""
    snap_enabled: bool = True
    grid_size: float = DEFAULT_GRID_SIZE
    snap_threshold: float = DEFAULT_SNAP_THRESHOLD
    zoom: ZoomConfig = field(default_factory=ZoomConfig)
    elastic: ElasticBoundsConfig = field(default_factory=ElasticBoundsConfig)
    inertia: InertiaConfig = field(default_factory=InertiaConfig)
    fit_margin: float = FIT_MARGIN
    min_zoom_padding: float = MIN_ZOOM_PADDING
    handle_size: float = TRANSFORM_HANDLE_SIZE
    reduced_motion: bool = False

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        defaults = cls()
        values = {}
        nested = {'zoom': ZoomConfig, 'elastic': ElasticBoundsConfig, 'inertia': InertiaConfig}
        for f in fields(cls):
            if f.name not in data:
                continue
            if f.name in nested:
                values[f.name] = _nested_from_dict(nested[f.name], data[f.name], getattr(defaults, f.name))
            else:
                values[f.name] = data[f.name]
        return cls(**values)


def _nested_from_dict(config_cls, data, default):
    if not isinstance(data, dict):
        return default
    known = {f.name for f in fields(config_cls)}
    return config_cls(**{k: v for k, v in data.items() if k in known})


def default_settings_path():
    return os.path.join(os.path.expanduser('~'), CONFIG_DIR_NAME, CONFIG_FILE_NAME)


def load_settings(path=None):
    """Load settings from a JSON config file

    Args:
        path: Config file path (defaults to ~/.frame_composer/config.json)

    Returns:
        EngineSettings (defaults when the file does not exist)
    """
    path = path or default_settings_path()
    try:
        if not os.path.exists(path):
            logger.debug(f"No config at {path}, using defaults")
            return EngineSettings()
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be an object: {path}")
        return EngineSettings.from_dict(data)
    except Exception as e:
        loggerRaise(e, "Error loading config")


def save_settings(settings, path=None):
    """Write settings to a JSON config file, creating the directory if needed"""
    path = path or default_settings_path()
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2)
        logger.debug(f"Saved config to {path}")
    except Exception as e:
        loggerRaise(e, "Error saving config")
