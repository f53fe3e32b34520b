import logging
import uuid
from collections import OrderedDict

from app.learning_map import ExpansionCoordinator, LayoutOptions, MapGenerator
from app.learning_map.errors import UnknownSessionError

logger = logging.getLogger(__name__)


class SessionStore:
    """
    In-memory learning map sessions, one coordinator per session.

    Nothing is persisted. When the store is full the least recently used
    session is dropped.
    """

    def __init__(
        self,
        *,
        timeout: float | None = 60.0,
        layout_options: LayoutOptions | None = None,
        max_sessions: int = 1000,
    ):
        self._timeout: float | None = timeout
        self._layout_options: LayoutOptions | None = layout_options
        self._max_sessions: int = max_sessions
        self._sessions: OrderedDict[str, ExpansionCoordinator] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, generator: MapGenerator) -> tuple[str, ExpansionCoordinator]:
        session_id = uuid.uuid4().hex
        coordinator = ExpansionCoordinator(
            generator, timeout=self._timeout, layout_options=self._layout_options
        )
        self._sessions[session_id] = coordinator

        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info('Session %s evicted', evicted)

        return session_id, coordinator

    def get(self, session_id: str) -> ExpansionCoordinator:
        try:
            coordinator = self._sessions[session_id]
        except KeyError as e:
            raise UnknownSessionError(session_id) from e
        self._sessions.move_to_end(session_id)
        return coordinator

    def drop(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise UnknownSessionError(session_id)
