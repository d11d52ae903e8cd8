"""Room services: membership bookkeeping for game rooms.

This package holds the transport-independent side of the relay. Socket
handlers and HTTP routes import the shared ``registry`` from here and keep
Socket.IO concerns on their side of the seam.
"""

from .registry import Departure, RoomRegistry, Session

registry = RoomRegistry()

__all__ = ['Departure', 'RoomRegistry', 'Session', 'registry']
