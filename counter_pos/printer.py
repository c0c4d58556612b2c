"""Thermal printer output: ticket lines drawn onto a bitmap and sent over USB."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from counter_pos.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_LINE_SPACING_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)

logger = logging.getLogger(__name__)

_FONT_OVERRIDE_ENV = "COUNTER_POS_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
)
# Narrow and wide glyphs; a monospaced face draws them at one advance width.
_WIDTH_SAMPLE = "iW.M"
_TAIL_SPACER_PX = 40


def font_candidates() -> list[str]:
    """Font paths to try, in order, without duplicates."""
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    ordered = [env_override, PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    for candidate in font_candidates():
        if Path(candidate).is_file():
            return candidate
    raise RuntimeError(
        f"No printer font found. Set {_FONT_OVERRIDE_ENV} to a monospaced .ttf/.ttc file. "
        f"Tried: {', '.join(font_candidates())}"
    )


def is_monospaced(font: object) -> bool:
    """True when every sample glyph has the same advance width."""
    widths = {round(font.getlength(char), 2) for char in _WIDTH_SAMPLE}
    return len(widths) == 1


def load_printer_font() -> object:
    """Load the ticket font; bill columns only line up with a monospaced face."""
    from PIL import ImageFont

    path = resolve_printer_font_path()
    font = ImageFont.truetype(path, PRINTER_FONT_SIZE)
    if not is_monospaced(font):
        raise RuntimeError(f"Printer font {path} is not monospaced; ticket columns would not align")
    return font


def check_printer_dependencies() -> tuple[bool, str]:
    """Report whether a ticket could be printed, for the status bar."""
    try:
        from escpos.printer import Usb  # noqa: F401

        load_printer_font()
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def render_ticket(lines: list[str], font: object) -> object:
    """Draw every line onto one 1-bit image as wide as the paper."""
    from PIL import Image, ImageDraw

    scratch = Image.new("1", (1, 1), color=1)
    measure_draw = ImageDraw.Draw(scratch)
    # Same slot height for every row keeps blank lines the same size as text.
    ascent_bbox = measure_draw.textbbox((0, 0), "Hg|", font=font)
    slot_px = (ascent_bbox[3] - ascent_bbox[1]) + PRINTER_LINE_SPACING_PX
    top_offset = ascent_bbox[1]

    img = Image.new("1", (PRINTER_WIDTH_PX, max(1, slot_px * len(lines) + _TAIL_SPACER_PX)), color=1)
    draw = ImageDraw.Draw(img)
    y = 0
    for line in lines:
        if line:
            draw.text((PRINTER_LEFT_INDENT_PX, y - top_offset), line, font=font, fill=0)
        y += slot_px
    return img


def print_lines(lines: list[str]) -> None:
    """Print a rendered ticket and cut the paper."""
    if not lines:
        return

    try:
        from escpos.printer import Usb
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    image = render_ticket(lines, load_printer_font())
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    try:
        printer.image(image)
        printer.cut()
    finally:
        printer.close()
    logger.info("ticket_printed lines=%d", len(lines))
