"""Toolkit-neutral input records consumed by the controllers.

Qt widgets translate their QMouseEvent/QWheelEvent/QKeyEvent into these so
the engine can be driven from tests without synthesizing Qt events.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from PyQt5.QtCore import Qt

from constants import (
    MODIFIER_SHIFT, MODIFIER_CTRL, MODIFIER_ALT, MODIFIER_META, BUTTON_LEFT,
)


@dataclass(frozen=True)
class PointerInput:
    """Pointer down/move/up sample in client coordinates.

    timestamp is in milliseconds and only matters for velocity tracking;
    None means "use the scheduler clock".
    """
    x: float
    y: float
    pointer_id: int = 1
    button: int = BUTTON_LEFT
    modifiers: FrozenSet[str] = field(default_factory=frozenset)
    timestamp: Optional[float] = None

    def has(self, modifier: str) -> bool:
        return modifier in self.modifiers


@dataclass(frozen=True)
class WheelInput:
    x: float
    y: float
    delta_y: float
    modifiers: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class KeyInput:
    key: str
    modifiers: FrozenSet[str] = field(default_factory=frozenset)

    def has(self, modifier: str) -> bool:
        return modifier in self.modifiers


def modifiers_from_qt(qt_modifiers) -> FrozenSet[str]:
    """Convert Qt.KeyboardModifiers into the engine's modifier names"""
    mods = set()
    if qt_modifiers & Qt.ShiftModifier:
        mods.add(MODIFIER_SHIFT)
    if qt_modifiers & Qt.ControlModifier:
        mods.add(MODIFIER_CTRL)
    if qt_modifiers & Qt.AltModifier:
        mods.add(MODIFIER_ALT)
    if qt_modifiers & Qt.MetaModifier:
        mods.add(MODIFIER_META)
    return frozenset(mods)
