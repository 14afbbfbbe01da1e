import math
from io import BytesIO

import pytest
from PIL import Image

from imageseal.core.errors import InvalidParameter, RenderFailure, UnsupportedFormat
from imageseal.models import WatermarkOptions
from imageseal.services.fonts import EmbeddedFontProvider
from imageseal.services.image_service import ImageWatermarkService


@pytest.fixture
def service() -> ImageWatermarkService:
    return ImageWatermarkService(font_provider=EmbeddedFontProvider())


def _red_pixels(image: Image.Image) -> int:
    return sum(1 for r, g, b, _ in image.getdata() if r > g + 60 and r > b + 60)


@pytest.mark.parametrize("fmt, name", [("PNG", "photo.png"), ("JPEG", "photo.jpg"), ("GIF", "anim.gif")])
def test_add_watermark_returns_png_of_same_size(service, make_image, fmt, name) -> None:
    options = WatermarkOptions(text="CONFIDENTIAL", font_size=20, color="#FF0000", opacity=100, angle=-30)

    rendered = service.add_watermark(make_image(fmt=fmt), name, options)

    assert rendered.mime_type == "image/png"
    assert rendered.filename == f"{name.rsplit('.', 1)[0]}_watermarked.png"
    assert rendered.page_count == 1

    result = Image.open(BytesIO(rendered.content))
    assert result.format == "PNG"
    assert result.size == (200, 150)
    assert _red_pixels(result.convert("RGBA")) > 0


def test_zero_opacity_leaves_image_untouched(service, make_image) -> None:
    options = WatermarkOptions(text="HIDDEN", color="#FF0000", opacity=0)

    rendered = service.add_watermark(make_image(), "photo.png", options)

    result = Image.open(BytesIO(rendered.content)).convert("RGBA")
    assert _red_pixels(result) == 0


def test_watermark_is_drawn_at_canvas_center(service, make_image) -> None:
    options = WatermarkOptions(text="XXXX", font_size=24, color="#000000", opacity=100, angle=0, spacing=100)

    rendered = service.add_watermark(make_image(size=(300, 300)), "photo.png", options)

    result = Image.open(BytesIO(rendered.content)).convert("RGBA")
    center_band = [result.getpixel((x, 150)) for x in range(130, 171)]
    assert any(pixel[0] < 128 for pixel in center_band)


def test_non_image_bytes_are_unsupported(service) -> None:
    options = WatermarkOptions(text="SEAL")

    with pytest.raises(UnsupportedFormat):
        service.add_watermark(b"definitely not an image", "photo.png", options)


def test_non_finite_angle_is_rejected(service, make_image) -> None:
    options = WatermarkOptions(text="SEAL", angle=math.nan)

    with pytest.raises(InvalidParameter):
        service.add_watermark(make_image(), "photo.png", options)


class _BrokenFontProvider:
    name = "broken"

    def image_font(self, size: int):
        raise OSError("invalid pixel size")

    def pdf_font_name(self) -> str:
        return "Helvetica"


def test_font_failure_is_a_render_failure(make_image) -> None:
    service = ImageWatermarkService(font_provider=_BrokenFontProvider())

    with pytest.raises(RenderFailure):
        service.add_watermark(make_image(), "photo.png", WatermarkOptions(text="SEAL"))


@pytest.mark.parametrize("angle", [-30, 60])
def test_single_tile_is_rotated_about_its_center(service, make_image, ink_centroid, angle) -> None:
    # a wide margin leaves exactly one tile, fully inside the canvas
    def render(degrees: float) -> Image.Image:
        options = WatermarkOptions(
            text="HOH", font_size=40, color="#000000", opacity=100, angle=degrees, spacing=2000
        )
        rendered = service.add_watermark(make_image(size=(300, 300)), "photo.png", options)
        return Image.open(BytesIO(rendered.content))

    upright_x, upright_y = ink_centroid(render(0))
    dx, dy = upright_x - 150, upright_y - 150
    assert abs(dx) < 2
    assert abs(dy) < 2

    # image rows grow downwards, so a positive angle turns clockwise on screen
    theta = math.radians(angle)
    expected = (150 + dx * math.cos(theta) - dy * math.sin(theta), 150 + dx * math.sin(theta) + dy * math.cos(theta))
    assert ink_centroid(render(angle)) == pytest.approx(expected, abs=2.5)
