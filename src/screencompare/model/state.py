"""
Viewer State (Data Model)
=========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the current screen list, view mode and theme
   in one place, owned by the host window.
2. Decoupling: The main window edits this object; the viewport engine only
   ever receives snapshots of it (`screens` as a tuple of frozen specs).

Classes:
    ViewerState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging

from screencompare.config import MAX_SCREENS
from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.presets import default_configuration
from screencompare.model.screen import ScreenSpec

logger = logging.getLogger(__name__)


@dataclass
class ViewerState:
    screens: list[ScreenSpec] = field(default_factory=default_configuration)
    view_mode: ViewMode = ViewMode.FRONT
    theme: Theme = Theme.LIGHT

    @property
    def can_add_screen(self) -> bool:
        return len(self.screens) < MAX_SCREENS

    def snapshot(self) -> tuple[ScreenSpec, ...]:
        return tuple(self.screens)

    def add_screen(self, spec: ScreenSpec) -> ScreenSpec:
        """
        Append a screen, renumbering it to the next display index.

        Raises:
            ValueError: If the list already holds the maximum number of screens.
        """
        if not self.can_add_screen:
            raise ValueError(f"At most {MAX_SCREENS} screens can be compared.")
        numbered = replace(spec, display_index=len(self.screens) + 1)
        self.screens.append(numbered)
        logger.info(f"Added screen {numbered.display_index}: {numbered.diagonal_inches:g}\"")
        return numbered

    def remove_screen(self, position: int) -> ScreenSpec:
        """Remove the screen at `position`; the remaining screens are renumbered."""
        removed = self.screens.pop(position)
        self.screens = [
            replace(spec, display_index=i + 1) for i, spec in enumerate(self.screens)
        ]
        logger.info(f"Removed screen {removed.display_index}")
        return removed

    def replace_screen(self, position: int, spec: ScreenSpec) -> None:
        self.screens[position] = replace(spec, display_index=position + 1)

    def reset(self) -> None:
        """Restore the default configuration; mode and theme are kept."""
        self.screens = default_configuration()
        logger.info("Viewer state reset to the default configuration.")
