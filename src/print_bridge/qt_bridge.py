"""Qt print bridge: silent render-and-print through QPrinter (OS spooler)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QRectF
from PySide6.QtGui import QPageLayout, QPainter
from PySide6.QtPrintSupport import QPrinter, QPrinterInfo
from PySide6.QtWidgets import QApplication

from .base_backend import BackendOutcome, PrintingBackend
from .errors import RenderingError
from .layout import page_orientation, place_image
from .pdf_renderer import PDFRenderer, RenderedPage

logger = logging.getLogger(__name__)

_APP_INSTANCE = None


def _ensure_qapplication() -> None:
    global _APP_INSTANCE
    app = QApplication.instance()
    if app is None:
        _APP_INSTANCE = QApplication([])
    else:
        _APP_INSTANCE = app


@dataclass(slots=True)
class RasterPrintOptions:
    """Fixed options for silent raster printing."""

    job_name: str = "print_bridge_job"
    dpi: int = 300
    copies: int = 1
    color: bool = True
    fit_to_page: bool = True


def printer_exists(printer_name: str) -> bool:
    return not QPrinterInfo.printerInfo(printer_name).isNull()


def _set_orientation(printer: QPrinter, rendered: RenderedPage) -> None:
    orientation = page_orientation(rendered.width_pt, rendered.height_pt)
    layout = printer.pageLayout()
    layout.setOrientation(
        QPageLayout.Landscape if orientation == "landscape" else QPageLayout.Portrait
    )
    printer.setPageLayout(layout)


def _draw_page_image(
    painter: QPainter,
    printer: QPrinter,
    rendered: RenderedPage,
    options: RasterPrintOptions,
) -> None:
    target_rect = QRectF(printer.pageRect(QPrinter.Unit.DevicePixel))
    image = rendered.image
    spot = place_image(target_rect.width(), target_rect.height(), image.width(), image.height(), options.fit_to_page)
    painter.drawImage(QRectF(target_rect.x() + spot.x, target_rect.y() + spot.y, spot.width, spot.height), image)


def raster_print(renderer: PDFRenderer, printer_name: str, options: RasterPrintOptions) -> int:
    """Draw every loaded page onto a QPrinter bound to printer_name; returns pages sent."""
    _ensure_qapplication()

    printer = QPrinter(QPrinter.HighResolution)
    printer.setPrinterName(printer_name)
    printer.setDocName(options.job_name)
    printer.setResolution(options.dpi)
    printer.setCopyCount(max(1, options.copies))
    printer.setColorMode(QPrinter.Color if options.color else QPrinter.GrayScale)
    printer.setFullPage(True)

    pages = renderer.iter_pages()
    try:
        first = next(pages)
    except StopIteration as exc:
        raise RenderingError("No rendered pages available.") from exc

    _set_orientation(printer, first)
    painter = QPainter()
    if not painter.begin(printer):
        raise RenderingError(f"Cannot start printer context: {printer_name}")

    count = 1
    try:
        _draw_page_image(painter, printer, first, options)
        for rendered in pages:
            _set_orientation(printer, rendered)
            printer.newPage()
            _draw_page_image(painter, printer, rendered, options)
            count += 1
    finally:
        painter.end()
    return count


class QtRenderPrintBackend(PrintingBackend):
    """Loads the PDF off-screen and prints it without any window or dialog.

    Layout completion is not observable from here, so a fixed settle delay
    runs between loading and printing.
    """

    def __init__(
        self,
        settle_delay: float = 3.5,
        dpi: int = 300,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settle_delay = max(0.0, float(settle_delay))
        self.dpi = dpi
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "qt-render-print"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        # QPrinter silently falls back to the default printer for unknown names
        if not printer_exists(printer_name):
            self._fail(file_path, printer_name, f"Printer '{printer_name}' not found")

        with PDFRenderer(dpi=self.dpi) as renderer:
            try:
                renderer.load(file_path)
            except RenderingError as exc:
                self._fail(file_path, printer_name, str(exc))

            logger.debug(f"Loaded {renderer.page_count} page(s), settling {self.settle_delay}s")
            self._sleep(self.settle_delay)

            options = RasterPrintOptions(job_name=Path(file_path).name, dpi=self.dpi)
            pages = raster_print(renderer, printer_name, options)

        return BackendOutcome.ok(
            self.name,
            printer_name,
            file_path,
            output=f"Printed {pages} page(s) without any dialog",
        )
