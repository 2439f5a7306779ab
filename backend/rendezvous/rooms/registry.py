"""In-memory two-party room registry."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from enum import Enum
import threading

from rendezvous.core.logging_config import get_logger

MAX_ROOM_MEMBERS = 2
DEFAULT_LOCK_STRIPES = 64

logger = get_logger(__name__)


class RoomError(Exception):
    """Base class for room-domain errors."""


class RoomInvariantError(RoomError):
    """Raised when a room is observed in a state the registry never produces."""


class CodeAllocationError(RoomError):
    """Raised when no free room code was found within the attempt budget."""


class JoinOutcome(str, Enum):
    CREATED = "created"
    JOINED = "joined"
    FULL = "full"
    ALREADY_MEMBER = "already_member"


@dataclass(slots=True)
class Room:
    """Room aggregate state. Members are kept in join order."""

    code: str
    members: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class JoinResult:
    """Outcome of one try_join call.

    ``peer_id`` is set for JOINED (the member that was already waiting).
    ``left_room`` names the room the member was moved out of, if any.
    """

    outcome: JoinOutcome
    room: str
    occupancy: int
    peer_id: str | None = None
    left_room: str | None = None


@dataclass(frozen=True, slots=True)
class LeaveResult:
    room: str | None
    occupancy: int


class RoomRegistry:
    """Authoritative mapping from room code to connected members.

    A room with no members is absent from the backing map. Room state is
    guarded by striped re-entrant locks; every operation on a member also
    holds that member's lock so its current room cannot change underneath.
    ``on_room_emptied`` runs while the emptied room's lock is still held.
    """

    def __init__(
        self,
        on_room_emptied: Callable[[str], None] | None = None,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be >= 1")

        self._rooms: dict[str, Room] = {}
        self._member_room: dict[str, str] = {}
        self._room_locks = [threading.RLock() for _ in range(lock_stripes)]
        self._member_locks = [threading.RLock() for _ in range(lock_stripes)]
        self._on_room_emptied = on_room_emptied

    def occupancy(self, code: str) -> int:
        """Return current member count; 0 for unknown rooms."""
        with self.lock_room(code):
            room = self._rooms.get(code)
            if room is None:
                return 0
            self._check_capacity(room)
            return len(room.members)

    def is_occupied(self, code: str) -> bool:
        return self.occupancy(code) > 0

    def get_room(self, code: str) -> Room | None:
        """Return a snapshot of the room, or None when nobody is in it."""
        with self.lock_room(code):
            room = self._rooms.get(code)
            if room is None:
                return None
            return Room(code=room.code, members=list(room.members), created_at=room.created_at)

    def find_room_by_member(self, member_id: str) -> str | None:
        """Return current room code for member, or None if member is not in any room."""
        with self._lock_member(member_id):
            return self._member_room.get(member_id)

    @contextmanager
    def lock_room(self, code: str) -> Iterator[None]:
        """Acquire the write lock guarding one room."""
        with self._room_locks[self._stripe(code)]:
            yield

    @contextmanager
    def lock_rooms(self, codes: Iterable[str]) -> Iterator[None]:
        """Acquire locks for several rooms in stripe order to avoid deadlock."""
        stripes = sorted({self._stripe(code) for code in codes})
        locks = [self._room_locks[stripe] for stripe in stripes]
        for lock in locks:
            lock.acquire()

        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    @contextmanager
    def _lock_member(self, member_id: str) -> Iterator[None]:
        with self._member_locks[hash(member_id) % len(self._member_locks)]:
            yield

    def try_join(self, code: str, member_id: str) -> JoinResult:
        """Admit a member to a room, moving it out of any other room first.

        FULL and ALREADY_MEMBER leave every room untouched, including the
        member's previous room.
        """
        with self._lock_member(member_id):
            current_code = self._member_room.get(member_id)
            lock_codes = [code]
            if current_code is not None and current_code != code:
                lock_codes.append(current_code)

            with self.lock_rooms(lock_codes):
                room = self._rooms.get(code)
                if room is not None:
                    self._check_capacity(room)
                    if member_id in room.members:
                        return JoinResult(
                            outcome=JoinOutcome.ALREADY_MEMBER,
                            room=code,
                            occupancy=len(room.members),
                            peer_id=self._other_member(room, member_id),
                        )
                    if len(room.members) >= MAX_ROOM_MEMBERS:
                        logger.info("Room %s is full, rejected %s", code, member_id)
                        return JoinResult(
                            outcome=JoinOutcome.FULL,
                            room=code,
                            occupancy=len(room.members),
                        )

                left_room: str | None = None
                if current_code is not None and current_code != code:
                    self._remove_member(current_code, member_id)
                    left_room = current_code

                if room is None:
                    room = Room(code=code)
                    self._rooms[code] = room
                    outcome = JoinOutcome.CREATED
                    peer_id = None
                else:
                    outcome = JoinOutcome.JOINED
                    peer_id = room.members[0]

                room.members.append(member_id)
                self._member_room[member_id] = code
                logger.info("Member %s %s room %s", member_id, outcome.value, code)
                return JoinResult(
                    outcome=outcome,
                    room=code,
                    occupancy=len(room.members),
                    peer_id=peer_id,
                    left_room=left_room,
                )

    def leave(self, member_id: str) -> LeaveResult:
        """Remove member from its room. Unknown members are a no-op."""
        with self._lock_member(member_id):
            code = self._member_room.get(member_id)
            if code is None:
                return LeaveResult(room=None, occupancy=0)

            with self.lock_room(code):
                occupancy = self._remove_member(code, member_id)
                return LeaveResult(room=code, occupancy=occupancy)

    def _remove_member(self, code: str, member_id: str) -> int:
        # Callers hold the member lock and the room lock.
        room = self._rooms.get(code)
        if room is None or member_id not in room.members:
            raise RoomInvariantError(f"member={member_id} indexed in room={code} but not a member")

        self._member_room.pop(member_id, None)
        room.members.remove(member_id)
        logger.info("Member %s left room %s (%d remaining)", member_id, code, len(room.members))
        if room.members:
            return len(room.members)

        del self._rooms[code]
        if self._on_room_emptied is not None:
            self._on_room_emptied(code)
        return 0

    def _stripe(self, code: str) -> int:
        return hash(code) % len(self._room_locks)

    @staticmethod
    def _check_capacity(room: Room) -> None:
        if len(room.members) > MAX_ROOM_MEMBERS:
            raise RoomInvariantError(
                f"room={room.code} holds {len(room.members)} members, max is {MAX_ROOM_MEMBERS}"
            )

    @staticmethod
    def _other_member(room: Room, member_id: str) -> str | None:
        for candidate in room.members:
            if candidate != member_id:
                return candidate
        return None


__all__ = [
    "CodeAllocationError",
    "JoinOutcome",
    "JoinResult",
    "LeaveResult",
    "MAX_ROOM_MEMBERS",
    "Room",
    "RoomError",
    "RoomInvariantError",
    "RoomRegistry",
]
