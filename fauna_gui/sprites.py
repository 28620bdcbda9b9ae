"""Pillow drawing of marker icons and the hover tooltip."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from fauna.records import IucnStatus

STATUS_COLORS = {
    IucnStatus.CRITICALLY_ENDANGERED: '#d32f2f',
    IucnStatus.ENDANGERED: '#f57c00',
    IucnStatus.VULNERABLE: '#fbc02d',
    IucnStatus.NEAR_THREATENED: '#689f38',
    IucnStatus.LEAST_CONCERN: '#388e3c',
}
UNKNOWN_STATUS_COLOR = '#666666'

ICON_SIZE = 128
ICON_RADIUS_RATIO = 60 / 128
TOOLTIP_BACKGROUND = (0, 0, 0, 230)
TOOLTIP_PADDING = (15, 10)


def status_color(status: Optional[str]) -> str:
    parsed = IucnStatus.parse(status)
    if parsed is None:
        return UNKNOWN_STATUS_COLOR
    return STATUS_COLORS[parsed]


def hex_to_rgba(value: str, alpha: int = 255) -> Tuple[int, int, int, int]:
    value = value.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Expected hex color RRGGBB, got {value!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha)


@lru_cache(maxsize=8)
def _font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    names = ("arialbd.ttf", "DejaVuSans-Bold.ttf") if bold else ("arial.ttf", "DejaVuSans.ttf")
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default()


def status_icon(initial: str, status: Optional[str], *, size: int = ICON_SIZE) -> Image.Image:
    """Fallback marker sprite: a status-coloured disc with the animal's initial."""
    color = hex_to_rgba(status_color(status))
    center = size / 2
    radius = size * ICON_RADIUS_RATIO
    box = (center - radius, center - radius, center + radius, center + radius)

    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    parsed = IucnStatus.parse(status)
    if parsed is not None and parsed.threatened:
        glow = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        ImageDraw.Draw(glow).ellipse(box, outline=color, width=max(2, size // 16))
        image = Image.alpha_composite(image, glow.filter(ImageFilter.GaussianBlur(size / 12)))

    draw = ImageDraw.Draw(image)
    draw.ellipse(box, fill=color)
    if parsed is not None and parsed.threatened:
        draw.ellipse(box, outline=color, width=max(1, size // 32))

    text = (initial or "?")[:1].upper()
    font = _font(max(8, size // 4), bold=True)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    origin = (center - (left + right) / 2, center - (top + bottom) / 2)
    draw.text(origin, text, font=font, fill=(255, 255, 255, 255))
    return image


def portrait_icon(photo: Image.Image, status: Optional[str], *, size: int = ICON_SIZE) -> Image.Image:
    """Clip a photo to the marker disc and ring it with the status colour."""
    fitted = ImageOps.fit(photo.convert("RGBA"), (size, size), method=Image.LANCZOS)
    center = size / 2
    radius = size * ICON_RADIUS_RATIO
    box = (center - radius, center - radius, center + radius, center + radius)

    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).ellipse(box, fill=255)
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    image.paste(fitted, (0, 0), mask)

    border = max(2, round(size * 6 / 128))
    ImageDraw.Draw(image).ellipse(box, outline=hex_to_rgba(status_color(status)), width=border)
    return image


def tooltip_image(title: str, subtitle: str = "", *, font_size: int = 14) -> Image.Image:
    title_font = _font(font_size, bold=True)
    body_font = _font(font_size)
    measure = ImageDraw.Draw(Image.new("RGBA", (4, 4)))
    title_box = measure.textbbox((0, 0), title, font=title_font)
    lines = [(title, title_font, title_box)]
    if subtitle:
        lines.append((subtitle, body_font, measure.textbbox((0, 0), subtitle, font=body_font)))

    pad_x, pad_y = TOOLTIP_PADDING
    spacing = max(2, font_size // 4)
    width = max(box[2] - box[0] for _, _, box in lines) + 2 * pad_x
    height = sum(box[3] - box[1] for _, _, box in lines) + spacing * (len(lines) - 1) + 2 * pad_y

    image = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.rounded_rectangle((0, 0, width - 1, height - 1), radius=5, fill=TOOLTIP_BACKGROUND)
    y = pad_y
    for text, font, box in lines:
        draw.text((pad_x - box[0], y - box[1]), text, font=font, fill=(255, 255, 255, 255))
        y += box[3] - box[1] + spacing
    return image
