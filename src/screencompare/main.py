"""
Application Initialization
==========================
This module parses the command line, constructs the model and the main
window, and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging from the command line options.
2. Instantiates the Viewer State (model) from the chosen preset/mode/theme.
3. Instantiates the Main Window (view) and passes the model into it.
4. Reports a missing 3D render context instead of crashing.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from PySide6.QtWidgets import QApplication, QMessageBox

from screencompare.logging_config import setup_logging
from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.presets import ALL_PRESETS, get_preset
from screencompare.model.state import ViewerState

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screencompare",
        description="Compare monitor sizes, distances and curvature in a 3D viewport."
    )
    parser.add_argument(
        "--preset",
        action="append",
        choices=sorted(ALL_PRESETS),
        metavar="KEY",
        help="Start with this monitor preset (repeatable), e.g. 34-3440-1440."
    )
    parser.add_argument(
        "--view",
        choices=[m.value for m in ViewMode],
        default=ViewMode.FRONT.value,
        help="Initial view mode."
    )
    parser.add_argument("--dark", action="store_true", help="Use the dark theme.")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def build_state(args: argparse.Namespace) -> ViewerState:
    state = ViewerState(
        view_mode=ViewMode(args.view),
        theme=Theme.DARK if args.dark else Theme.LIGHT
    )
    if args.preset:
        state.screens = []
        for key in args.preset:
            if not state.can_add_screen:
                logger.warning(f"Ignoring preset '{key}': screen limit reached.")
                continue
            state.add_screen(get_preset(key).to_spec())
    return state


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    app = QApplication(sys.argv[:1])
    app.setApplicationName("Screen Compare")

    # 3. Initialize the Data Model
    state = build_state(args)

    # 4. Initialize the Main Window, passing the model
    # Imported here so the CLI parser works without a render stack
    from screencompare.view.main_window import MainWindow
    from screencompare.view.widgets.viewport_3d import RenderContextUnavailableError

    try:
        window = MainWindow(state)
    except RenderContextUnavailableError as e:
        logger.error(f"Cannot start: {e}")
        QMessageBox.critical(None, "Screen Compare", str(e))
        sys.exit(1)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
