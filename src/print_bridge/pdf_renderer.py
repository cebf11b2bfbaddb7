"""PDF loading and page rasterization for the render-and-print backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import fitz
from PySide6.QtGui import QImage

from .errors import RenderingError


@dataclass(slots=True)
class RenderedPage:
    """Rendered page handed to the printer surface."""

    page_index: int
    width_pt: float
    height_pt: float
    image: QImage


class PDFRenderer:
    """Opens a material file once and streams page images one at a time."""

    def __init__(self, dpi: int = 300):
        self.dpi = max(72, int(dpi))
        self._doc: fitz.Document | None = None

    def load(self, pdf_path: str) -> int:
        """Open the document and return its page count."""
        self.close()
        try:
            doc = fitz.open(pdf_path)
        except Exception as exc:
            raise RenderingError(f"Failed to load PDF: {exc}") from exc
        if not doc.is_pdf or len(doc) == 0:
            doc.close()
            raise RenderingError("Failed to load PDF: document has no pages")
        self._doc = doc
        return len(doc)

    @property
    def page_count(self) -> int:
        return len(self._doc) if self._doc is not None else 0

    @staticmethod
    def _pixmap_to_qimage(pix: fitz.Pixmap) -> QImage:
        fmt = QImage.Format_RGBA8888 if pix.alpha else QImage.Format_RGB888
        # .copy() detaches from fitz memory to keep QImage valid after pixmap is freed.
        return QImage(pix.samples, pix.width, pix.height, pix.stride, fmt).copy()

    def iter_pages(self) -> Iterator[RenderedPage]:
        if self._doc is None:
            raise RenderingError("No document loaded")
        zoom = float(self.dpi) / 72.0
        matrix = fitz.Matrix(zoom, zoom)
        for page_index, page in enumerate(self._doc):
            pix = page.get_pixmap(matrix=matrix, colorspace=fitz.csRGB, alpha=False)
            yield RenderedPage(
                page_index=page_index,
                width_pt=page.rect.width,
                height_pt=page.rect.height,
                image=self._pixmap_to_qimage(pix),
            )

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self) -> "PDFRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
