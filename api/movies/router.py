"""
Movie CRUD endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Response, status

from core.id_allocator import IdAllocator
from core.mirror import MirrorSynchronizer

from . import dependencies, schemas, service
from .models import Movie

router = APIRouter(prefix="/api/movies")


def _to_response(movie: Movie) -> schemas.MovieResponse:
    return schemas.MovieResponse(**movie.to_dict())


@router.get("", response_model=schemas.MoviePageResponse)
async def list_movies(
    page: int = Query(0, ge=0),
    size: int = Query(service.DEFAULT_PAGE_SIZE, ge=1, le=service.MAX_PAGE_SIZE),
    sort_by: str = Query("id", max_length=50),
    direction: str = Query("asc", max_length=10),
    filter_type: str | None = Query(default=None, max_length=50),
    filter_value: str | None = Query(default=None, max_length=500),
) -> schemas.MoviePageResponse:
    result = await service.list_movies(
        page=page,
        size=size,
        sort_by=sort_by,
        direction=direction,
        filter_type=filter_type,
        filter_value=filter_value,
    )
    return schemas.MoviePageResponse(
        movies=[_to_response(m) for m in result.movies],
        page=result.page,
        size=result.size,
        total_elements=result.total_elements,
        total_pages=result.total_pages,
        sort_by=result.sort_by,
        direction=result.direction,
        filter_type=result.filter_type,
        filter_value=result.filter_value,
    )


@router.get("/{movie_id}", response_model=schemas.MovieResponse)
async def get_movie(movie_id: int = Path(..., ge=1)) -> schemas.MovieResponse:
    return _to_response(await service.get_movie(movie_id))


@router.post("", response_model=schemas.MovieResponse, status_code=status.HTTP_201_CREATED)
async def create_movie(
    request: schemas.MovieRequest,
    allocator: IdAllocator = Depends(dependencies.get_id_allocator),
    mirror: MirrorSynchronizer = Depends(dependencies.get_mirror),
) -> schemas.MovieResponse:
    movie = await service.create_movie(
        year=request.year,
        title=request.title,
        studios=request.studios,
        producers=request.producers,
        winner=request.winner,
        allocator=allocator,
        mirror=mirror,
    )
    return _to_response(movie)


@router.put("/{movie_id}", response_model=schemas.MovieResponse)
async def update_movie(
    request: schemas.MovieRequest,
    movie_id: int = Path(..., ge=1),
    mirror: MirrorSynchronizer = Depends(dependencies.get_mirror),
) -> schemas.MovieResponse:
    movie = await service.update_movie(
        movie_id,
        year=request.year,
        title=request.title,
        studios=request.studios,
        producers=request.producers,
        winner=request.winner,
        mirror=mirror,
    )
    return _to_response(movie)


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_movie(
    movie_id: int = Path(..., ge=1),
    mirror: MirrorSynchronizer = Depends(dependencies.get_mirror),
) -> Response:
    await service.delete_movie(movie_id, mirror=mirror)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
