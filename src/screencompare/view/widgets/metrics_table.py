"""
Screen Metrics Table
====================
A read-only table with one row per shown screen: physical size, field of
view, pixel density and, when the OS scales the desktop, the scaled figures.

Why is this file needed?
------------------------
The 3D view shows how big the screens look, but not the numbers behind it.
Formatting lives in `metrics_row()` so it can be checked without a widget.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from PySide6.QtWidgets import QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView, QWidget

from screencompare.model.screen import ScreenSpec, InvalidScreenSpecError

logger = logging.getLogger(__name__)

METRIC_HEADERS: list[str] = [
    "Screen", "Size [in]", "FOV H × V [°]", "PPI", "PPD", "Scaled",
]
MISSING = "--"


def screen_label(spec: ScreenSpec) -> str:
    width_px, height_px = spec.resolution
    label = f"#{spec.display_index} {spec.diagonal_inches:g}\" {width_px}×{height_px}"
    if spec.is_curved:
        label += f" {spec.curvature_radius_mm:g}R"
    return label


def metrics_row(spec: ScreenSpec) -> list[str]:
    """Table cells for one screen; a spec that fails validation shows placeholders."""
    try:
        metrics = spec.metrics()
    except InvalidScreenSpecError as e:
        logger.debug(f"No metrics for {spec}: {e}")
        return [f"#{spec.display_index}"] + [MISSING] * (len(METRIC_HEADERS) - 1)

    ppd = f"{metrics.ppd:.1f}"
    if metrics.is_retina:
        ppd += " (retina)"

    scaled = MISSING
    if metrics.is_scaled:
        width_px, height_px = metrics.scaled_resolution
        scaled = (
            f"{width_px}×{height_px} @ {spec.scaling_percent:g} %, "
            f"{metrics.scaled_ppi:.1f} PPI, {metrics.scaled_ppd:.1f} PPD"
        )

    return [
        screen_label(spec),
        f"{metrics.width_inches:.1f} × {metrics.height_inches:.1f}",
        f"{metrics.horizontal_fov_deg:.1f} × {metrics.vertical_fov_deg:.1f}",
        f"{metrics.ppi:.1f}",
        ppd,
        scaled,
    ]


class ScreenMetricsTable(QTableWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setColumnCount(len(METRIC_HEADERS))
        self.setHorizontalHeaderLabels(METRIC_HEADERS)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QTableWidget.SelectRows)
        self.verticalHeader().setVisible(False)
        self.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.horizontalHeader().setStretchLastSection(True)

    def set_screens(self, screens: Sequence[ScreenSpec]) -> None:
        self.setRowCount(len(screens))
        for row_idx, spec in enumerate(screens):
            for col_idx, text in enumerate(metrics_row(spec)):
                self.setItem(row_idx, col_idx, QTableWidgetItem(text))
