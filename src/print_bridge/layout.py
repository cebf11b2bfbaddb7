"""Where a rasterized page lands on the printable area."""

from __future__ import annotations

from typing import NamedTuple


class Placement(NamedTuple):
    x: float
    y: float
    width: float
    height: float


def page_orientation(page_width_pt: float, page_height_pt: float) -> str:
    return "landscape" if page_width_pt > page_height_pt else "portrait"


def place_image(paper_w: float, paper_h: float, image_w: float, image_h: float, shrink: bool = True) -> Placement:
    """Center an image on the paper, scaled to fit unless shrink is off (1:1)."""
    paper_w, paper_h = max(paper_w, 1.0), max(paper_h, 1.0)
    image_w, image_h = max(image_w, 1.0), max(image_h, 1.0)

    scale = min(paper_w / image_w, paper_h / image_h) if shrink else 1.0
    width, height = image_w * scale, image_h * scale
    return Placement((paper_w - width) / 2.0, (paper_h - height) / 2.0, width, height)
