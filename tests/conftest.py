"""
Pytest configuration and shared document fixtures.
"""

import os
import sys
from io import BytesIO

import pytest


def _ensure_repo_on_path() -> None:
    """
    Ensure the repository root is on sys.path.
    """
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_on_path()


@pytest.fixture
def make_image():
    from PIL import Image

    def _make(size=(200, 150), fmt="PNG", color=(255, 255, 255)) -> bytes:
        buffer = BytesIO()
        mode = "P" if fmt == "GIF" else "RGB"
        Image.new("RGB", size, color).convert(mode).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_pdf():
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.pdfgen import canvas

    def _make(page_sizes=(letter, landscape(letter)), labelled=True) -> bytes:
        buffer = BytesIO()
        c = canvas.Canvas(buffer)
        for number, size in enumerate(page_sizes, start=1):
            c.setPageSize(size)
            if labelled:
                c.drawString(72, 72, f"page {number}")
            c.showPage()
        c.save()
        return buffer.getvalue()

    return _make


@pytest.fixture
def ink_centroid():
    """Weighted centre of the dark pixels of a light image, in pixel coordinates."""

    def _centroid(image) -> tuple:
        gray = image.convert("L")
        width = gray.width
        total = sum_x = sum_y = 0.0
        for index, value in enumerate(gray.getdata()):
            weight = 255 - value
            if weight:
                total += weight
                sum_x += weight * (index % width + 0.5)
                sum_y += weight * (index // width + 0.5)
        assert total > 0, "no ink found"
        return sum_x / total, sum_y / total

    return _centroid
