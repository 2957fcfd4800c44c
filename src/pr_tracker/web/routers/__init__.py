"""Web routers."""

from . import auth, calculator, chat, movements, records, wods

__all__ = ["auth", "calculator", "chat", "movements", "records", "wods"]
