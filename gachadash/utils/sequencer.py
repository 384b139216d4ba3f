from typing import Dict


class RequestSequencer:
    """
    Monotonic request ids per client session.

    A lookup that finishes after a newer one from the same session started
    is stale; callers report it as superseded so the client can drop it.
    Both methods run on the event loop without awaiting, so no lock is held.
    """

    def __init__(self):
        self._latest: Dict[str, int] = {}

    def begin(self, session_key: str) -> int:
        request_id = self._latest.get(session_key, 0) + 1
        self._latest[session_key] = request_id
        return request_id

    def is_current(self, session_key: str, request_id: int) -> bool:
        return self._latest.get(session_key) == request_id
