"""Global configuration loaded from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

import yaml

from .errors import MalformedSceneData

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = (1024.0, 768.0)


@dataclass
class WindowConfig:
    # Window size in physical pixels
    size: tuple[float, float] = DEFAULT_WINDOW_SIZE


@dataclass
class GraphicsConfig:
    window: WindowConfig = field(default_factory=WindowConfig)


@dataclass
class Configuration:
    """Global configuration.

    YAML format:
    ```yaml
    graphics:
      window:
        size: [1024, 768]
    ```
    """

    graphics: GraphicsConfig = field(default_factory=GraphicsConfig)

    @property
    def window_size(self) -> tuple[float, float]:
        return self.graphics.window.size

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """Read configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            MalformedSceneData: If the file's contents are invalid
        """
        path = Path(path)
        logger.debug("Loading configuration from %s", path)
        with open(path) as f:
            text = f.read()
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise MalformedSceneData(f"Configuration is not valid YAML: {err}") from err
        return cls.from_dict(data)

    @classmethod
    def load_or_default(cls, path: str | Path) -> Self:
        """Read configuration from ``path``, or use defaults if it is absent."""
        if not Path(path).exists():
            logger.debug("No configuration at %s, using defaults", path)
            return cls()
        return cls.load(path)

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        if data is None:
            return cls()
        try:
            size = data["graphics"]["window"]["size"]
        except (KeyError, TypeError) as err:
            raise MalformedSceneData(
                "Configuration needs graphics.window.size"
            ) from err
        try:
            width, height = (float(v) for v in size)
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(
                f"graphics.window.size must be two numbers, got {size!r}"
            ) from err
        if not (width > 0 and height > 0):
            raise MalformedSceneData(
                f"graphics.window.size must be positive, got {size!r}"
            )
        return cls(graphics=GraphicsConfig(window=WindowConfig(size=(width, height))))

    def to_dict(self) -> dict[str, Any]:
        return {"graphics": {"window": {"size": list(self.graphics.window.size)}}}
