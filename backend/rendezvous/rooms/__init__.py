"""Room domain package: codes, membership registry, passage metadata."""

from rendezvous.rooms.codes import CodeGenerator
from rendezvous.rooms.models import PassageInfo
from rendezvous.rooms.passages import PassageStore
from rendezvous.rooms.registry import CodeAllocationError
from rendezvous.rooms.registry import JoinOutcome
from rendezvous.rooms.registry import JoinResult
from rendezvous.rooms.registry import LeaveResult
from rendezvous.rooms.registry import MAX_ROOM_MEMBERS
from rendezvous.rooms.registry import Room
from rendezvous.rooms.registry import RoomError
from rendezvous.rooms.registry import RoomInvariantError
from rendezvous.rooms.registry import RoomRegistry

__all__ = [
    "CodeAllocationError",
    "CodeGenerator",
    "JoinOutcome",
    "JoinResult",
    "LeaveResult",
    "MAX_ROOM_MEMBERS",
    "PassageInfo",
    "PassageStore",
    "Room",
    "RoomError",
    "RoomInvariantError",
    "RoomRegistry",
]
