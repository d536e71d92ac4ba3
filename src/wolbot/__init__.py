"""wolbot — Wake-on-LAN over Telegram with online verification."""

__version__ = "0.1.0"
