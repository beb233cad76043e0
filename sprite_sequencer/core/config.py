"""
Session Configuration - Grid, playback and export settings

Settings can be stored as YAML so a grid that fits a particular sheet
layout can be reused:

    grid:
      rows: 4
      cols: 8
      gap_x: 2
    play_rate: 1.5
    export_scale: 4
"""

import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Any, Dict

from .grid import GridConfig
from .viewport import ViewportConfig
from .reorder import AutoScrollConfig, PointerEnvironment
from .exporter import EncoderConfig


logger = logging.getLogger(__name__)


def _filtered(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
    return {k: v for k, v in (data or {}).items() if k in valid_fields}


@dataclass
class SessionConfig:
    """Everything an editing session can be configured with"""

    grid: GridConfig = field(default_factory=GridConfig)
    play_rate: float = 1.0
    export_scale: float = 1.0
    debounce_ms: float = 300.0
    pointer_environment: PointerEnvironment = PointerEnvironment.POINTER_PRIMARY

    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    auto_scroll: AutoScrollConfig = field(default_factory=AutoScrollConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain types for YAML serialization"""
        data = asdict(self)
        data['pointer_environment'] = self.pointer_environment.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionConfig':
        """Create from dictionary; unknown keys are ignored"""
        data = dict(data or {})
        kwargs = _filtered(cls, data)

        if 'grid' in kwargs:
            kwargs['grid'] = GridConfig.from_dict(kwargs['grid'] or {})
        if 'viewport' in kwargs:
            kwargs['viewport'] = ViewportConfig(**_filtered(ViewportConfig, kwargs['viewport']))
        if 'auto_scroll' in kwargs:
            kwargs['auto_scroll'] = AutoScrollConfig(**_filtered(AutoScrollConfig, kwargs['auto_scroll']))
        if 'encoder' in kwargs:
            kwargs['encoder'] = EncoderConfig(**_filtered(EncoderConfig, kwargs['encoder']))
        if 'pointer_environment' in kwargs:
            kwargs['pointer_environment'] = PointerEnvironment(kwargs['pointer_environment'])

        for key in ('play_rate', 'export_scale', 'debounce_ms'):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])

        return cls(**kwargs)


def load_config(path: str | Path) -> SessionConfig:
    """Read a SessionConfig from a YAML file"""
    path = Path(path)
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.debug("Loaded session config from %s", path)
    return SessionConfig.from_dict(data)


def save_config(config: SessionConfig, path: str | Path) -> Path:
    """Write a SessionConfig as YAML"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return path
