import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, errors, log, settings
from core.id_allocator import IdAllocator
from core.mirror import MirrorSynchronizer
from core.schema import SchemaBootstrapper
from movies import loader
from movies import router as movies_router
from producers import router as producers_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        await SchemaBootstrapper().ensure_schema()

        # One instance of each file store per process; they own the file locks.
        app.state.id_allocator = IdAllocator(settings.id_counter_file(), indent=settings.id_counter_indent())
        app.state.mirror = MirrorSynchronizer(
            settings.mirror_file(),
            bundled_path=settings.mirror_bundled_file(),
            delimiter=settings.mirror_delimiter(),
            winner_literal=settings.mirror_winner_literal(),
        )

        await loader.bootstrap_store(
            allocator=app.state.id_allocator,
            mirror=app.state.mirror,
            import_mirror=settings.import_mirror_on_startup(),
            reset_to_original=settings.reset_mirror_to_original(),
            min_columns=settings.mirror_min_columns(),
        )
        logger.info("startup_complete")
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

errors.register_exception_handlers(app)

# Register the fixed intervals path before the /{movie_id} routes.
app.include_router(producers_router.router, tags=["producers"])
app.include_router(movies_router.router, tags=["movies"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "golden raspberry awards api"}
