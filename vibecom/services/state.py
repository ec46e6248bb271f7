from __future__ import annotations
import datetime

# Lifetimes of the session tokens handed out by ``services.users.login``.

TOKEN_TTL = datetime.timedelta(hours=24)
REFRESH_TOKEN_TTL = datetime.timedelta(days=30)
