"""Pydantic models for room metadata APIs."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StrictInt
from pydantic import StrictStr


class PassageInfo(BaseModel):
    """Passage metadata attached to one room code.

    Serialized with the camelCase keys clients send and expect back.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    passage_id: StrictStr = Field(alias="passageId")
    frame_ids: list[StrictInt] = Field(alias="frameIds")
    passage_title: StrictStr | None = Field(default=None, alias="passageTitle")

    def to_public(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)
