"""PySide6 side panel for the globe viewer.

Holds the search box, the IUCN status filter and the detail view of the
selected animal. The panel integrates with the glfw render loop by calling
QApplication.processEvents() inside poll(), so it never blocks a frame.
"""
from __future__ import annotations

import html
import sys
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from PIL import Image
from PySide6 import QtCore, QtWidgets
from PySide6.QtGui import QPixmap

from fauna import AnimalRecord, DiscrepancyReport, IucnStatus
from fauna.records import discrepancy_prompt, status_label

ALL_STATUSES_LABEL = "All statuses"
REPORT_THANKS = "Thank you for your report. It has been submitted for review."


@dataclass(frozen=True)
class ControlState:
    search: str
    status: Optional[str]


class FaunaControlPanel(QtCore.QObject):
    def __init__(self, *, title: str = "Fauna Globe") -> None:
        super().__init__()
        self._app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv or [])

        self._closed = False
        self._changed = False
        self._close_detail = False
        self._detail_record: Optional[AnimalRecord] = None
        self._occurrence_requests: Deque[AnimalRecord] = deque()
        self._reports: Deque[DiscrepancyReport] = deque()
        self._detail_pixmap: QPixmap | None = None

        self._win = QtWidgets.QWidget()
        self._win.setWindowTitle(title)
        self._win.setAttribute(QtCore.Qt.WidgetAttribute.WA_DeleteOnClose, True)
        self._win.setMinimumSize(360, 520)

        layout = QtWidgets.QGridLayout(self._win)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setHorizontalSpacing(8)
        layout.setVerticalSpacing(6)

        row = 0
        layout.addWidget(QtWidgets.QLabel("Search"), row, 0)
        self._search_edit = QtWidgets.QLineEdit()
        self._search_edit.setPlaceholderText("Animal name")
        self._search_edit.setClearButtonEnabled(True)
        layout.addWidget(self._search_edit, row, 1)

        row += 1
        layout.addWidget(QtWidgets.QLabel("IUCN status"), row, 0)
        self._status_combo = QtWidgets.QComboBox()
        self._status_combo.addItem(ALL_STATUSES_LABEL, None)
        for status in IucnStatus:
            self._status_combo.addItem(status.label, status.value)
        layout.addWidget(self._status_combo, row, 1)

        row += 1
        btn_row = QtWidgets.QHBoxLayout()
        self._reset_btn = QtWidgets.QPushButton("Show all animals")
        btn_row.addWidget(self._reset_btn, 0)
        btn_row.addStretch(1)
        self._fps_label = QtWidgets.QLabel("FPS: ?")
        btn_row.addWidget(self._fps_label, 0)
        layout.addLayout(btn_row, row, 0, 1, 2)

        row += 1
        layout.addWidget(self._hline(), row, 0, 1, 2)

        row += 1
        self._status_label = QtWidgets.QLabel("Status: Loading")
        layout.addWidget(self._status_label, row, 0, 1, 2)

        row += 1
        self._detail_label = QtWidgets.QLabel("")
        self._detail_label.setWordWrap(True)
        layout.addWidget(self._detail_label, row, 0, 1, 2)

        row += 1
        layout.addWidget(self._hline(), row, 0, 1, 2)

        row += 1
        self._portrait = QtWidgets.QLabel()
        self._portrait.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self._portrait.setFixedHeight(128)
        layout.addWidget(self._portrait, row, 0, 1, 2)

        row += 1
        self._detail_view = QtWidgets.QLabel("Double-click an animal on the globe to see its details.")
        self._detail_view.setWordWrap(True)
        self._detail_view.setTextFormat(QtCore.Qt.TextFormat.RichText)
        self._detail_view.setAlignment(QtCore.Qt.AlignmentFlag.AlignTop)
        layout.addWidget(self._detail_view, row, 0, 1, 2)
        layout.setRowStretch(row, 1)

        row += 1
        detail_btns = QtWidgets.QHBoxLayout()
        self._occurrence_btn = QtWidgets.QPushButton("Show All Occurrences")
        self._report_btn = QtWidgets.QPushButton("Report Discrepancy")
        self._close_btn = QtWidgets.QPushButton("Close")
        self._occurrence_btn.setEnabled(False)
        self._report_btn.setEnabled(False)
        self._close_btn.setEnabled(False)
        detail_btns.addWidget(self._occurrence_btn)
        detail_btns.addWidget(self._report_btn)
        detail_btns.addWidget(self._close_btn)
        detail_btns.addStretch(1)
        layout.addLayout(detail_btns, row, 0, 1, 2)

        self._win.destroyed.connect(self._on_destroyed)
        self._search_edit.textChanged.connect(self._on_filter_change)
        self._status_combo.currentIndexChanged.connect(self._on_filter_change)
        self._reset_btn.clicked.connect(self._on_reset)
        self._occurrence_btn.clicked.connect(self._on_show_occurrences)
        self._report_btn.clicked.connect(self._on_report_discrepancy)
        self._close_btn.clicked.connect(self._on_close_detail)

        try:
            QtWidgets.QApplication.setStyle("Fusion")
        except Exception:
            pass
        self._win.show()

    # ---- Public API ----
    def poll(self) -> bool:
        if self._closed:
            return False
        self._app.processEvents()
        return not self._closed

    def destroy(self) -> None:
        if not self._closed:
            self._closed = True
            self._win.close()

    def consume_changes(self) -> tuple[bool, ControlState]:
        changed = self._changed
        self._changed = False
        return changed, self.current_state()

    def current_state(self) -> ControlState:
        return ControlState(
            search=self._search_edit.text().strip(),
            status=self._status_combo.currentData(),
        )

    def pop_occurrence_request(self) -> Optional[AnimalRecord]:
        if self._occurrence_requests:
            return self._occurrence_requests.popleft()
        return None

    def pop_discrepancy_report(self) -> Optional[DiscrepancyReport]:
        if self._reports:
            return self._reports.popleft()
        return None

    def consume_close_request(self) -> bool:
        requested = self._close_detail
        self._close_detail = False
        return requested

    def set_fps(self, fps_text: str) -> None:
        self._fps_label.setText(fps_text)

    def update_status(self, status: str, detail: str = "") -> None:
        self._status_label.setText(f"Status: {status}")
        self._detail_label.setText(detail or "")

    def show_detail(self, record: AnimalRecord, portrait: Optional[Image.Image] = None) -> None:
        if self._closed:
            return
        self._detail_record = record
        habitat = html.escape(record.habitat or "Various")
        fun_fact = html.escape(record.fun_fact or "No fun fact available")
        self._detail_view.setText(
            f"<h2>{html.escape(record.name)}</h2>"
            f"<p><b>Location:</b> {html.escape(record.country or 'Unknown')}</p>"
            f"<p><b>IUCN status:</b> {html.escape(status_label(record.iucn_status))}</p>"
            f"<p><b>Habitat:</b> {habitat}</p>"
            f"<p><b>Fun Fact:</b> {fun_fact}</p>"
        )
        self._occurrence_btn.setEnabled(bool(record.occurrences))
        self._report_btn.setEnabled(True)
        self._close_btn.setEnabled(True)
        self.set_portrait(portrait)

    def set_portrait(self, image: Optional[Image.Image]) -> None:
        if image is None:
            self._portrait.clear()
            self._detail_pixmap = None
            return
        from PIL.ImageQt import ImageQt

        pixmap = QPixmap.fromImage(ImageQt(image))
        self._portrait.setPixmap(pixmap)
        self._detail_pixmap = pixmap

    def clear_detail(self) -> None:
        if self._closed:
            return
        self._detail_record = None
        self._detail_view.setText("Double-click an animal on the globe to see its details.")
        self._occurrence_btn.setEnabled(False)
        self._report_btn.setEnabled(False)
        self._close_btn.setEnabled(False)
        self.set_portrait(None)

    # ---- Event handlers / internals ----
    def _on_destroyed(self, _obj=None) -> None:
        self._closed = True

    def _on_filter_change(self, *_args) -> None:
        self._changed = True

    def _on_reset(self) -> None:
        self._search_edit.blockSignals(True)
        self._status_combo.blockSignals(True)
        try:
            self._search_edit.clear()
            self._status_combo.setCurrentIndex(0)
        finally:
            self._search_edit.blockSignals(False)
            self._status_combo.blockSignals(False)
        self._changed = True

    def _on_show_occurrences(self) -> None:
        if self._detail_record is not None:
            self._occurrence_requests.append(self._detail_record)

    def _on_report_discrepancy(self) -> None:
        record = self._detail_record
        if record is None:
            return
        text, accepted = QtWidgets.QInputDialog.getMultiLineText(
            self._win, "Report Discrepancy", discrepancy_prompt(record.name)
        )
        report = DiscrepancyReport.from_input(record.name, text) if accepted else None
        if report is None:
            return
        self._reports.append(report)
        QtWidgets.QMessageBox.information(self._win, "Report Discrepancy", REPORT_THANKS)

    def _on_close_detail(self) -> None:
        self._close_detail = True

    @staticmethod
    def _hline() -> QtWidgets.QFrame:
        f = QtWidgets.QFrame()
        f.setFrameShape(QtWidgets.QFrame.Shape.HLine)
        f.setFrameShadow(QtWidgets.QFrame.Shadow.Sunken)
        return f
