import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass
class Session:
    """What the registry knows about one live connection."""
    connection_id: str
    user_id: str
    room_id: Optional[str] = None


@dataclass(frozen=True)
class Departure:
    """A connection removed from a room, and what is left behind."""
    room_id: str
    connection_id: str
    user_id: str
    remaining: int

    @property
    def room_deleted(self) -> bool:
        return self.remaining == 0


class RoomRegistry:
    """In-memory rooms, per-connection sessions and the user index.

    Each room is an ordered mapping of connection id -> user id, in join
    order. A room only exists while it has members. Every public method
    runs under one lock so handlers dispatched on different threads see a
    consistent view; callers emit after the method returns.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._rooms: Dict[str, Dict[str, str]] = {}
        self._user_index: Dict[str, str] = {}
        self._sessions: Dict[str, Session] = {}

    # ---- mutations ----

    def join(self, room_id: str, connection_id: str, user_id: str) -> Tuple[int, Optional[Departure]]:
        """Add a connection to a room.

        Returns the room's member count after the join, and the departure
        from the connection's previous room if it was in a different one.
        """
        with self._lock:
            previous = None
            session = self._sessions.get(connection_id)
            if session and session.room_id and session.room_id != room_id:
                previous = self._remove_member(session.room_id, connection_id)
            if session and session.user_id != user_id and self._user_index.get(session.user_id) == connection_id:
                del self._user_index[session.user_id]
            members = self._rooms.setdefault(room_id, {})
            members[connection_id] = user_id
            self._user_index[user_id] = connection_id
            if session is None:
                session = Session(connection_id, user_id)
                self._sessions[connection_id] = session
            session.user_id = user_id
            session.room_id = room_id
            return len(members), previous

    def leave(self, room_id: str, connection_id: str) -> Optional[Departure]:
        """Remove a connection from a room; None if it was not a member."""
        with self._lock:
            session = self._sessions.get(connection_id)
            if session and session.room_id == room_id:
                session.room_id = None
            return self._remove_member(room_id, connection_id)

    def disconnect(self, connection_id: str) -> Optional[Departure]:
        """Forget a connection entirely.

        Returns the departure from its room, or None when the connection
        never joined or had already left.
        """
        with self._lock:
            session = self._sessions.pop(connection_id, None)
            if session is None:
                return None
            if self._user_index.get(session.user_id) == connection_id:
                del self._user_index[session.user_id]
            if session.room_id is None:
                return None
            return self._remove_member(session.room_id, connection_id)

    def reset(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._user_index.clear()
            self._sessions.clear()

    def _remove_member(self, room_id: str, connection_id: str) -> Optional[Departure]:
        members = self._rooms.get(room_id)
        if not members or connection_id not in members:
            return None
        user_id = members.pop(connection_id)
        if not members:
            del self._rooms[room_id]
        return Departure(room_id, connection_id, user_id, len(members))

    # ---- queries ----

    def has_room(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def players_count(self, room_id: str) -> int:
        with self._lock:
            return len(self._rooms.get(room_id, {}))

    def members(self, room_id: str) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._rooms.get(room_id, {}).items())

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def user_count(self) -> int:
        with self._lock:
            return len(self._user_index)

    def connection_for(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._user_index.get(user_id)

    def session(self, connection_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(connection_id)
            if session is None:
                return None
            return Session(session.connection_id, session.user_id, session.room_id)

    def snapshot(self) -> List[dict]:
        with self._lock:
            return [
                {'uuid': room_id, 'playersCount': len(members)}
                for room_id, members in self._rooms.items()
            ]
