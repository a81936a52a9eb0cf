"""
Tests for the input records handed to the controllers.
"""
from PyQt5.QtCore import Qt

from models.events import PointerInput, KeyInput, modifiers_from_qt


class TestModifiersFromQt:

    def test_no_modifiers(self):
        assert modifiers_from_qt(Qt.NoModifier) == frozenset()

    def test_combined_flags(self):
        mods = modifiers_from_qt(Qt.ShiftModifier | Qt.AltModifier)
        assert mods == frozenset({'shift', 'alt'})

    def test_ctrl_and_meta(self):
        mods = modifiers_from_qt(Qt.ControlModifier | Qt.MetaModifier)
        assert mods == frozenset({'ctrl', 'meta'})


class TestInputRecords:

    def test_pointer_defaults(self):
        pointer = PointerInput(3, 4)
        assert pointer.pointer_id == 1
        assert pointer.button == 0
        assert pointer.timestamp is None
        assert not pointer.has('shift')

    def test_key_modifiers(self):
        key = KeyInput('=', modifiers_from_qt(Qt.ControlModifier))
        assert key.has('ctrl')
        assert not key.has('alt')
