"""Runtime configuration defaults for persistence, billing and printing."""

from __future__ import annotations

import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


DB_PATH = os.environ.get("COUNTER_POS_DB_PATH", "data/counter-pos.db")
# Empty means the terminal app opens DB_PATH directly instead of talking to a server.
SERVER_URL = os.environ.get("COUNTER_POS_SERVER_URL", "").strip()
SERVER_HOST = "0.0.0.0"
SERVER_PORT = 3001
REMOTE_TIMEOUT_SECONDS = 5.0
SQLITE_BUSY_TIMEOUT_SECONDS = 5.0

# Bill and KOT numbers share one counter.
BILL_NUMBER_WIDTH = 5
MENU_CACHE_TTL_SECONDS = 5.0

# Taxes are switched off in production; the fields stay on every bill.
TAX_ENABLED = _env_flag("COUNTER_POS_TAX_ENABLED", False)
CGST_RATE = "0.025"
SGST_RATE = "0.025"

RESTAURANT_NAME = "MADHURAM"
RESTAURANT_TAGLINE = "CAFE AND TIFFINS"
RESTAURANT_GSTIN = "37AAWPI8183N1ZL"
DEFAULT_CASHIER = "Sunil"
CURRENCY_SYMBOL = "Rs."

ADMIN_PASSWORD = os.environ.get("COUNTER_POS_ADMIN_PASSWORD", "Madhuram@2024#Admin")
ADMIN_MAX_ATTEMPTS = 5
ADMIN_LOCKOUT_SECONDS = 60
EXPORT_DIR = "exports"

DEBUG_LOG_PATH = os.environ.get("COUNTER_POS_LOG_PATH", "/tmp/counter-pos-debug.log")

# 80mm thermal printer defaults.
PRINTER_USB_VENDOR_ID = 0x0416
PRINTER_USB_PRODUCT_ID = 0x5011
PRINTER_WIDTH_PX = 576
PRINTER_FONT_SIZE = 24
PRINTER_FONT_PATH = "/System/Library/Fonts/Menlo.ttc"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_LINE_SPACING_PX = 6
RECEIPT_WIDTH_CHARS = 42
