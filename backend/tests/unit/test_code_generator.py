"""Room code generation and allocation tests."""

from __future__ import annotations

import re

import pytest

from rendezvous.rooms.codes import CodeGenerator
from rendezvous.rooms.registry import CodeAllocationError
from rendezvous.rooms.registry import RoomRegistry

CODE_PATTERN = re.compile(r"^[0-9A-F]{5}$")


def test_generate_returns_five_uppercase_hex_characters() -> None:
    generator = CodeGenerator()

    for _ in range(200):
        assert CODE_PATTERN.match(generator.generate())


def test_generate_respects_configured_length() -> None:
    generator = CodeGenerator(code_length=8)

    code = generator.generate()

    assert len(code) == 8
    assert code == code.upper()


@pytest.mark.parametrize(
    ("code_length", "max_attempts"),
    [
        (0, 10),
        (41, 10),
        (5, 0),
    ],
)
def test_constructor_rejects_out_of_range_arguments(code_length: int, max_attempts: int) -> None:
    with pytest.raises(ValueError):
        CodeGenerator(code_length=code_length, max_attempts=max_attempts)


def test_allocate_resamples_until_code_is_free() -> None:
    """Input: first two candidates occupied -> Output: third candidate returned."""
    generator = CodeGenerator()
    candidates = iter(["AAAAA", "BBBBB", "CCCCC"])
    generator.generate = lambda: next(candidates)
    occupied = {"AAAAA", "BBBBB"}

    assert generator.allocate(lambda code: code in occupied) == "CCCCC"


def test_allocate_fails_loudly_after_attempt_budget() -> None:
    generator = CodeGenerator(max_attempts=7)
    checked: list[str] = []

    def _always_occupied(code: str) -> bool:
        checked.append(code)
        return True

    with pytest.raises(CodeAllocationError):
        generator.allocate(_always_occupied)
    assert len(checked) == 7


def test_allocate_never_returns_a_live_room_code() -> None:
    """Input: 1000 allocations, each code then occupied -> Output: no duplicates."""
    registry = RoomRegistry()
    generator = CodeGenerator()
    seen: set[str] = set()

    for idx in range(1000):
        code = generator.allocate(registry.is_occupied)
        assert CODE_PATTERN.match(code)
        assert code not in seen
        assert registry.occupancy(code) == 0
        seen.add(code)
        registry.try_join(code, f"member-{idx}")

    assert all(registry.occupancy(code) == 1 for code in seen)
