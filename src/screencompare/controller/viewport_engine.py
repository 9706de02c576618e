"""
Viewport Engine
===============
The single entry point collaborators talk to: screen list, view mode, theme
and viewport size go in; the widget reads the composed scene and the camera
pose back out every frame.

Why is this file needed?
------------------------
1. Orchestration: It wires the scene composer, the camera controller and the
   input router together in the order an update needs.
2. Debounce: Distance edits arrive on every keystroke. Camera retargets for
   them are coalesced by a restartable single-shot `QTimer`, so only the
   last edit in a burst moves the camera.
3. Lifecycle: `dispose()` stops the timer; afterwards every call is a no-op.

All methods run on the Qt GUI thread.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from screencompare.config import EngineSettings
from screencompare.controller.camera_controller import CameraController
from screencompare.controller.input_router import InputRouter
from screencompare.controller.scene_composer import SceneComposer, SceneUpdate
from screencompare.model.camera_state import ViewMode, Theme, CameraPose
from screencompare.model.screen import ScreenSpec

logger = logging.getLogger(__name__)


class ViewportEngine(QObject):
    """Scene + camera state behind one 3D viewport."""
    scene_changed = Signal(int)          # scene version, geometry must be redrawn
    decorations_changed = Signal()       # theme or size dependent styling changed
    view_mode_changed = Signal(str)

    def __init__(self, settings: Optional[EngineSettings] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.settings: EngineSettings = settings or EngineSettings()

        self.composer = SceneComposer(self.settings)
        self.camera = CameraController(self.settings)
        self.input = InputRouter(self.camera, self.settings)

        self._screens: tuple[ScreenSpec, ...] = ()
        self._theme: Theme = Theme.LIGHT
        self._viewport_size: tuple[int, int] = (1, 1)
        self._disposed: bool = False

        self._camera_timer = QTimer(self)
        self._camera_timer.setSingleShot(True)
        self._camera_timer.setInterval(self.settings.debounce_ms)
        self._camera_timer.timeout.connect(self._apply_pending_camera_update)

        self.composer.marker.set_mode(self.camera.mode)
        self._refresh()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------
    @property
    def view_mode(self) -> ViewMode:
        return self.camera.mode

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def viewport_size(self) -> tuple[int, int]:
        return self._viewport_size

    @property
    def scene_version(self) -> int:
        return self.composer.version

    @property
    def has_pending_camera_update(self) -> bool:
        return self._camera_timer.isActive()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def update_screens(self, screens: Sequence[ScreenSpec]) -> SceneUpdate:
        """
        Replace the displayed screen set. Identical content (together with an
        unchanged viewport size and theme) skips every rebuild.
        """
        if self._disposed:
            return SceneUpdate()
        self._screens = tuple(screens)
        return self._refresh()

    def set_view_mode(self, mode: ViewMode) -> bool:
        """Start the transition to `mode`. Returns False if the mode is unchanged."""
        if self._disposed:
            return False
        mode = ViewMode(mode)
        if mode == self.camera.mode:
            return False

        # The mode switch retargets with the latest screens already
        self._camera_timer.stop()
        self.input.cancel()
        self.camera.set_mode(mode)
        self.composer.marker.set_mode(mode)
        self.view_mode_changed.emit(str(mode))
        return True

    def set_theme(self, theme: Theme) -> SceneUpdate:
        if self._disposed:
            return SceneUpdate()
        self._theme = Theme(theme)
        return self._refresh()

    def resize(self, width_px: int, height_px: int) -> SceneUpdate:
        """Record the new viewport size; size-dependent widths are refreshed synchronously."""
        if self._disposed:
            return SceneUpdate()
        self._viewport_size = (max(1, int(width_px)), max(1, int(height_px)))
        return self._refresh()

    def tick(self) -> bool:
        """
        Advance one frame: camera animation, spring-back and marker fade.

        Returns:
            True if the frame needs to be re-rendered.
        """
        if self._disposed:
            return False
        camera_changed = self.camera.tick()
        marker_changed = self.composer.step_marker()
        return camera_changed or marker_changed

    def render_pose(self) -> CameraPose:
        return self.camera.render_pose()

    def flush_pending_camera_update(self) -> None:
        """Apply a debounced camera update now instead of waiting for the timer."""
        if self._camera_timer.isActive():
            self._camera_timer.stop()
            self._apply_pending_camera_update()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._camera_timer.stop()
        self.input.cancel()
        self._disposed = True
        logger.info("Viewport engine disposed.")

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------
    def _refresh(self) -> SceneUpdate:
        update = self.composer.update(self._screens, self._viewport_size, self._theme)
        if not update.changed:
            return update

        if update.geometry_rebuilt:
            self.camera.set_screens(self.composer.specs)
            if update.distances_changed and self.camera.mode != ViewMode.FRONT:
                self._schedule_camera_update()
            self.scene_changed.emit(self.composer.version)

        if update.theme_changed or update.size_changed:
            self.decorations_changed.emit()
        return update

    def _schedule_camera_update(self) -> None:
        # start() on an active single-shot timer restarts the countdown
        self._camera_timer.start()
        logger.debug(f"Camera update scheduled in {self.settings.debounce_ms} ms")

    def _apply_pending_camera_update(self) -> None:
        if self._disposed:
            return
        self.camera.retarget()
