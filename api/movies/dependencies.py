"""
Per-process file stores for movie routes.

Both objects are built once in the app lifespan and kept on `app.state`, so
every request shares the same locks.
"""

from __future__ import annotations

from fastapi import Request

from core.id_allocator import IdAllocator
from core.mirror import MirrorSynchronizer


def get_id_allocator(request: Request) -> IdAllocator:
    allocator = getattr(request.app.state, "id_allocator", None)
    if allocator is None:
        raise RuntimeError("Id allocator is not initialized. Build it on startup.")
    return allocator


def get_mirror(request: Request) -> MirrorSynchronizer:
    mirror = getattr(request.app.state, "mirror", None)
    if mirror is None:
        raise RuntimeError("Mirror is not initialized. Build it on startup.")
    return mirror
