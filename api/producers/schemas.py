"""
Pydantic schemas for producer interval responses.

Field names serialize in camelCase (`previousWin`, `followingWin`) to keep
the public JSON shape of the awards API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProducerIntervalResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    producer: str
    interval: int = Field(..., gt=0)
    previous_win: int = Field(..., alias="previousWin")
    following_win: int = Field(..., alias="followingWin")


class IntervalsResponse(BaseModel):
    min: list[ProducerIntervalResponse]
    max: list[ProducerIntervalResponse]
