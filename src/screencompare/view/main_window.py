"""
Main Application Window
=======================
The host window around the 3D viewport: toolbar, screen menu, metrics dock
and status bar.

Why is this file needed?
------------------------
1. Layout: It embeds the viewport as the central widget.
2. Routing: It connects global actions (view mode, theme, add/remove/reset
   screens) to the viewer state and pushes the resulting snapshot into the
   viewport engine.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QMainWindow, QToolBar, QMessageBox, QDockWidget
from PySide6.QtGui import QAction, QActionGroup, QCloseEvent

from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.presets import ALL_PRESETS
from screencompare.model.state import ViewerState
from screencompare.view.widgets.metrics_table import ScreenMetricsTable
from screencompare.view.widgets.viewport_3d import Viewport3DWidget

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Screen Compare"

_MODE_LABELS: dict[ViewMode, str] = {
    ViewMode.FRONT: "Front",
    ViewMode.TOP: "Top",
    ViewMode.ISOMETRIC: "Isometric",
}


class MainWindow(QMainWindow):
    def __init__(self, state: ViewerState, parent: Optional[QMainWindow] = None) -> None:
        super().__init__(parent)
        self.state: ViewerState = state

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1200, 800)

        # --- CENTRAL WIDGET: 3D Visualization ---
        self.viewport = Viewport3DWidget(parent=self)
        self.setCentralWidget(self.viewport)
        self.engine = self.viewport.engine

        # --- DOCK: Screen metrics ---
        self.metrics_table = ScreenMetricsTable(self)
        self.metrics_dock = QDockWidget("Screen Metrics", self)
        self.metrics_dock.setObjectName("MetricsDock")
        self.metrics_dock.setAllowedAreas(Qt.BottomDockWidgetArea | Qt.RightDockWidgetArea)
        self.metrics_dock.setWidget(self.metrics_table)
        self.addDockWidget(Qt.BottomDockWidgetArea, self.metrics_dock)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        # --- SIGNAL CONNECTIONS ---
        self.engine.view_mode_changed.connect(self._on_view_mode_changed)

        # Initial state
        self.engine.set_theme(self.state.theme)
        self.push_screens()
        self.engine.set_view_mode(self.state.view_mode)
        self._sync_mode_actions(self.state.view_mode)

    def _create_actions(self) -> None:
        # View modes (exclusive)
        self.mode_group = QActionGroup(self)
        self.mode_group.setExclusive(True)
        self.mode_actions: dict[ViewMode, QAction] = {}
        for mode, label in _MODE_LABELS.items():
            action = QAction(label, self)
            action.setCheckable(True)
            action.triggered.connect(lambda _checked=False, m=mode: self.on_view_mode(m))
            self.mode_group.addAction(action)
            self.mode_actions[mode] = action
        self.mode_actions[ViewMode.FRONT].setShortcut("1")
        self.mode_actions[ViewMode.TOP].setShortcut("2")
        self.mode_actions[ViewMode.ISOMETRIC].setShortcut("3")

        self.act_dark = QAction("Dark Theme", self)
        self.act_dark.setCheckable(True)
        self.act_dark.setChecked(self.state.theme == Theme.DARK)
        self.act_dark.toggled.connect(self.on_toggle_dark)

        self.act_remove = QAction("Remove Last Screen", self)
        self.act_remove.setShortcut("Ctrl+Backspace")
        self.act_remove.triggered.connect(self.on_remove_last)

        self.act_reset = QAction("Reset Screens", self)
        self.act_reset.setShortcut("Ctrl+R")
        self.act_reset.triggered.connect(self.on_reset)

        self.act_exit = QAction("Exit", self)
        self.act_exit.setShortcut("Ctrl+Q")
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        screens_menu = menu_bar.addMenu("&Screens")
        self.add_menu = screens_menu.addMenu("Add Screen")
        for key, preset in ALL_PRESETS.items():
            action = QAction(preset.label, self)
            action.triggered.connect(lambda _checked=False, k=key: self.on_add_preset(k))
            self.add_menu.addAction(action)
        screens_menu.addAction(self.act_remove)
        screens_menu.addAction(self.act_reset)
        screens_menu.addSeparator()
        screens_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        for action in self.mode_actions.values():
            view_menu.addAction(action)
        view_menu.addSeparator()
        view_menu.addAction(self.act_dark)
        view_menu.addAction(self.metrics_dock.toggleViewAction())

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("View", self)
        toolbar.setMovable(False)
        for action in self.mode_actions.values():
            toolbar.addAction(action)
        toolbar.addSeparator()
        toolbar.addAction(self.act_dark)
        self.addToolBar(toolbar)

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------
    def on_view_mode(self, mode: ViewMode) -> None:
        self.state.view_mode = mode
        self.engine.set_view_mode(mode)

    def on_toggle_dark(self, checked: bool) -> None:
        self.state.theme = Theme.DARK if checked else Theme.LIGHT
        self.engine.set_theme(self.state.theme)

    def on_add_preset(self, key: str) -> None:
        if not self.state.can_add_screen:
            QMessageBox.information(self, VISIBLE_APP_NAME, "The maximum number of screens is already shown.")
            return
        self.state.add_screen(ALL_PRESETS[key].to_spec())
        self.push_screens()

    def on_remove_last(self) -> None:
        if not self.state.screens:
            return
        self.state.remove_screen(len(self.state.screens) - 1)
        self.push_screens()

    def on_reset(self) -> None:
        self.state.reset()
        self.push_screens()

    def push_screens(self) -> None:
        """Hand the current screen snapshot to the engine and refresh the UI."""
        snapshot = self.state.snapshot()
        self.engine.update_screens(snapshot)
        self.metrics_table.set_screens(snapshot)
        self.add_menu.setEnabled(self.state.can_add_screen)
        self.act_remove.setEnabled(bool(self.state.screens))

        shown = len(self.engine.composer.specs)
        rejected = len(self.engine.composer.rejected)
        message = f"{shown} screen(s)"
        if rejected:
            message += f", {rejected} skipped (invalid)"
        self.statusBar().showMessage(message)

    def _on_view_mode_changed(self, mode: str) -> None:
        self._sync_mode_actions(ViewMode(mode))

    def _sync_mode_actions(self, mode: ViewMode) -> None:
        self.mode_actions[mode].setChecked(True)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.viewport.dispose()
        event.accept()
