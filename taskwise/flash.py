"""One-render flash mailbox on top of Flask's message flashing.

Handlers queue messages with ``flask.flash(message, category)`` before a
redirect. The queue is drained at the start of the next request and rendered
by it. If that request renders nothing the messages are gone.
"""

from __future__ import annotations

from typing import Literal, TypedDict

from flask import g, get_flashed_messages, session

FlashKind = Literal["info", "success", "warning", "danger"]

# Flask's own session key for flashed messages
FLASH_KEY = "_flashes"


class FlashMessage(TypedDict):
    type: str
    message: str


class FlashMailbox:
    def take(self) -> list[FlashMessage]:
        """Read and clear the queue in one step.

        Flask caches the first ``get_flashed_messages`` read for the rest of
        the request, so later calls pick up messages flashed since then
        straight from the session.
        """
        if not g.get("_flash_taken"):
            g._flash_taken = True
            pairs = get_flashed_messages(with_categories=True)
        else:
            pairs = session.pop(FLASH_KEY, None) or []
        return [FlashMessage(type=str(kind), message=str(message)) for kind, message in pairs]
