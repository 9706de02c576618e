"""
3D Viewport Widget (PyVista Wrapper)
====================================
Renders the engine's scene with a perspective camera and forwards mouse,
wheel and touch input to the engine's input router.

The engine owns all state. This widget only draws:
    * scene_changed       -> screen actors and the axis indicator are rebuilt
    * decorations_changed -> colours, line widths and background are restyled
    * frame timer         -> engine.tick(), camera pose applied, render
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout
from PySide6.QtCore import Qt, QEvent, QObject, QTimer
from PySide6.QtGui import QCloseEvent, QResizeEvent, QMouseEvent, QWheelEvent, QTouchEvent, QEventPoint

from pyvistaqt import QtInteractor
import pyvista as pv

from screencompare.config import (
    THEME_COLORS, FRAME_INTERVAL_MS, CAMERA_FOV_DEG, CAMERA_NEAR_M, CAMERA_FAR_M
)
from screencompare.controller.viewport_engine import ViewportEngine
from screencompare.view.widgets.mesh_utils import MeshUtils

logger = logging.getLogger(__name__)

# Pointer id used for the mouse; touch points use their own (non-negative) ids
MOUSE_POINTER_ID: int = -1


class RenderContextUnavailableError(RuntimeError):
    """The VTK render window could not be created."""


class Viewport3DWidget(QWidget):
    def __init__(self, engine: Optional[ViewportEngine] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.engine: ViewportEngine = engine if engine is not None else ViewportEngine(parent=self)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        try:
            self.plotter: QtInteractor = QtInteractor(self)
        except Exception as e:
            logger.exception(f"Failed to create the 3D render window: {e}")
            raise RenderContextUnavailableError(f"3D rendering is not available: {e}") from e
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        # --- Actors state ---
        self._screen_actors: list[pv.Actor] = []
        self._indicator_actor: Optional[pv.Actor] = None
        self._marker_actor: Optional[pv.Actor] = None
        self._disposed: bool = False

        self._attach_input()

        self.engine.scene_changed.connect(self._on_scene_changed)
        self.engine.decorations_changed.connect(self._on_decorations_changed)

        self._create_marker()
        self._rebuild_scene()
        self._apply_decorations()
        self._apply_camera()

        # Frame loop
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------
    def render_now(self) -> None:
        """Apply the current camera pose and paint one frame."""
        if self._disposed:
            return
        self._apply_camera()
        self.plotter.render()

    def dispose(self) -> None:
        """Stop the frame loop and release the render window."""
        if self._disposed:
            return
        self._disposed = True
        self._frame_timer.stop()
        self.engine.dispose()
        self._screen_actors.clear()
        self._indicator_actor = None
        self._marker_actor = None
        self.plotter.close()
        logger.info("3D viewport disposed.")

    # ------------------------------------------------------------------------------
    # Internal: Layer Management
    # ------------------------------------------------------------------------------
    def _on_scene_changed(self, version: int) -> None:
        if self._disposed:
            return
        logger.debug(f"Redrawing scene v{version}")
        self._rebuild_scene()
        self.render_now()

    def _on_decorations_changed(self) -> None:
        if self._disposed:
            return
        self._apply_decorations()
        self.render_now()

    def _rebuild_scene(self) -> None:
        """Replace every screen actor and the indicator; nothing is patched in place."""
        for actor in self._screen_actors:
            self.plotter.remove_actor(actor, render=False)
        self._screen_actors.clear()

        for geometry in self.engine.composer.geometries:
            panel = geometry.panel
            act_panel = self.plotter.add_mesh(
                MeshUtils.surface_to_polydata(panel.mesh),
                color=panel.color,
                opacity=panel.opacity,
                lighting=False,
                pickable=False,
                show_scalar_bar=False,
                reset_camera=False,
            )
            self._screen_actors.append(act_panel)

            border = geometry.border
            act_border = self.plotter.add_mesh(
                MeshUtils.merge_surfaces(border.pieces),
                color=border.color,
                lighting=False,
                pickable=False,
                show_scalar_bar=False,
                reset_camera=False,
            )
            self._screen_actors.append(act_border)

        self._rebuild_indicator()

    def _rebuild_indicator(self) -> None:
        if self._indicator_actor is not None:
            self.plotter.remove_actor(self._indicator_actor, render=False)
            self._indicator_actor = None

        indicator = self.engine.composer.indicator
        segments = indicator.dash_segments()
        if len(segments) == 0:
            return

        self._indicator_actor = self.plotter.add_mesh(
            MeshUtils.segments_to_polydata(segments),
            color=indicator.color,
            line_width=indicator.line_width,
            lighting=False,
            pickable=False,
            show_scalar_bar=False,
            render_lines_as_tubes=False,
            reset_camera=False,
        )

    def _create_marker(self) -> None:
        marker = self.engine.composer.marker
        self._marker_actor = self.plotter.add_mesh(
            MeshUtils.marker_sphere(marker.radius),
            color=marker.color,
            opacity=marker.opacity,
            smooth_shading=True,
            pickable=False,
            show_scalar_bar=False,
            reset_camera=False,
        )
        self._marker_actor.SetVisibility(marker.visible)

    def _apply_marker(self) -> None:
        if self._marker_actor is None:
            return
        marker = self.engine.composer.marker
        self._marker_actor.prop.opacity = marker.opacity
        self._marker_actor.SetVisibility(marker.visible)

    def _apply_decorations(self) -> None:
        """Theme- and size-dependent styling."""
        composer = self.engine.composer
        self.plotter.set_background(THEME_COLORS[str(composer.theme)]["background"])

        if self._indicator_actor is not None:
            self._indicator_actor.prop.color = composer.indicator.color
            self._indicator_actor.prop.line_width = composer.indicator.line_width

        if self._marker_actor is not None:
            self._marker_actor.prop.color = composer.marker.color
        self._apply_marker()

    def _apply_camera(self) -> None:
        pose = self.engine.render_pose()
        camera = self.plotter.camera
        camera.position = pose.position.to_tuple()
        camera.focal_point = pose.look_at.to_tuple()
        camera.up = pose.up.to_tuple()
        camera.view_angle = CAMERA_FOV_DEG
        camera.clipping_range = (CAMERA_NEAR_M, CAMERA_FAR_M)

    def _on_frame(self) -> None:
        if self._disposed:
            return
        if self.engine.tick():
            self._apply_marker()
            self.render_now()

    # ------------------------------------------------------------------------------
    # Internal: Setup & Input
    # ------------------------------------------------------------------------------
    def _init_plotter(self) -> None:
        self.plotter.set_background(THEME_COLORS["light"]["background"])
        self.plotter.disable_parallel_projection()
        self.plotter.enable_lightkit()

    def _attach_input(self) -> None:
        # Events are consumed here so VTK's own interactor style never moves the camera
        self.plotter.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.plotter.installEventFilter(self)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is not self.plotter or self._disposed:
            return super().eventFilter(watched, event)

        etype = event.type()
        if etype in (QEvent.MouseButtonPress, QEvent.MouseMove, QEvent.MouseButtonRelease):
            self._handle_mouse(event)
            return True
        if etype == QEvent.Wheel:
            self._handle_wheel(event)
            return True
        if etype in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd, QEvent.TouchCancel):
            self._handle_touch(event)
            return True
        return super().eventFilter(watched, event)

    def _handle_mouse(self, event: QMouseEvent) -> None:
        router = self.engine.input
        pos = event.position()
        etype = event.type()

        if etype == QEvent.MouseButtonPress and event.button() == Qt.LeftButton:
            router.pointer_down(MOUSE_POINTER_ID, pos.x(), pos.y())
        elif etype == QEvent.MouseMove:
            if router.pointer_move(MOUSE_POINTER_ID, pos.x(), pos.y()):
                self.render_now()
        elif etype == QEvent.MouseButtonRelease and event.button() == Qt.LeftButton:
            router.pointer_up(MOUSE_POINTER_ID)
        event.accept()

    def _handle_wheel(self, event: QWheelEvent) -> None:
        # Qt reports scrolling away from the user as positive; that zooms in
        if self.engine.input.wheel(-event.angleDelta().y()):
            self.render_now()
        event.accept()

    def _handle_touch(self, event: QTouchEvent) -> None:
        router = self.engine.input
        if event.type() == QEvent.TouchCancel:
            router.cancel()
            event.accept()
            return

        changed = False
        for point in event.points():
            pos = point.position()
            state = point.state()
            if state == QEventPoint.State.Pressed:
                router.pointer_down(point.id(), pos.x(), pos.y())
            elif state == QEventPoint.State.Updated:
                changed = router.pointer_move(point.id(), pos.x(), pos.y()) or changed
            elif state == QEventPoint.State.Released:
                router.pointer_up(point.id())
        if changed:
            self.render_now()
        event.accept()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        size = event.size()
        self.engine.resize(size.width(), size.height())

    def closeEvent(self, event: QCloseEvent) -> None:
        self.dispose()
        event.accept()
