class InvocationGuard:
    """
    Remembers the last invocation id handled by this process.

    The platform may redeliver an invocation it already ran; a repeat of the
    previous id is treated as a replay. State is per process and lost on cold
    start, so this is best-effort suppression only.
    """

    def __init__(self) -> None:
        self._last_request_id: str | None = None

    @property
    def last_request_id(self) -> str | None:
        return self._last_request_id

    def is_replay(self, request_id: str | None) -> bool:
        """Return True for a repeat of the previous id, otherwise remember this one."""
        if request_id and request_id == self._last_request_id:
            return True
        self._last_request_id = request_id
        return False
