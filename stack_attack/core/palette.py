"""
Color Palette
=============

Provides convenient access to the candy color palette loaded from config.

A ColorTag is simply the palette index. Clustering and the sum-all rule
compare tags by equality only; names and RGB values are for renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from stack_attack.core.config_loader import ColorConfig, GameConfig, get_config

ColorTag = int


@dataclass(frozen=True)
class CandyColor:
    """Runtime representation of a palette entry."""
    config: ColorConfig

    @property
    def tag(self) -> ColorTag:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.config.rgb

    @property
    def highlight(self) -> Tuple[int, int, int]:
        """Lighter shade used for the glossy top of a candy."""
        return tuple(min(255, c + 60) for c in self.config.rgb)

    @property
    def shadow(self) -> Tuple[int, int, int]:
        """Darker shade used for candy borders."""
        return tuple(int(c * 0.6) for c in self.config.rgb)

    def __repr__(self) -> str:
        return f"CandyColor({self.tag}: {self.name})"


class Palette:
    """
    Collection of all candy colors.

    Provides indexed access by ColorTag and lookup by name.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize palette from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._colors: Tuple[CandyColor, ...] = tuple(
            CandyColor(color_config) for color_config in config.palette
        )

    def __len__(self) -> int:
        return len(self._colors)

    def __getitem__(self, tag: ColorTag) -> CandyColor:
        if 0 <= tag < len(self._colors):
            return self._colors[tag]
        raise IndexError(f"Color tag {tag} out of range [0, {len(self._colors)})")

    def __iter__(self):
        return iter(self._colors)

    @property
    def tags(self) -> Tuple[ColorTag, ...]:
        """All valid color tags in order."""
        return tuple(color.tag for color in self._colors)

    def get_by_name(self, name: str) -> Optional[CandyColor]:
        """Get color by name (case-insensitive)."""
        name_lower = name.lower()
        for color in self._colors:
            if color.name.lower() == name_lower:
                return color
        return None
