"""
Producer interval endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import intervals, schemas, service

router = APIRouter()


def _to_response(item: intervals.ProducerInterval) -> schemas.ProducerIntervalResponse:
    return schemas.ProducerIntervalResponse(
        producer=item.producer,
        interval=item.interval,
        previous_win=item.previous_win,
        following_win=item.following_win,
    )


@router.get(
    "/api/movies/producers/intervals",
    response_model=schemas.IntervalsResponse,
    response_model_by_alias=True,
)
async def get_intervals() -> schemas.IntervalsResponse:
    summary = await service.producer_intervals()
    return schemas.IntervalsResponse(
        min=[_to_response(i) for i in summary.min],
        max=[_to_response(i) for i in summary.max],
    )
