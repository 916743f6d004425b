"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photobooth.adapters.flux_client import HttpxFluxClient
from photobooth.adapters.supabase_event_repository import SupabaseEventRepository
from photobooth.adapters.supabase_photo_repository import SupabasePhotoRepository
from photobooth.adapters.supabase_rate_limit_store import SupabaseRateLimitStore
from photobooth.adapters.supabase_storage import SupabaseObjectStorage
from photobooth.config import Settings
from photobooth.services.materializer import ResultMaterializer
from photobooth.services.photos import PhotoService
from photobooth.services.pipeline import TransformPipeline
from photobooth.services.polling import JobPoller
from photobooth.services.rate_limiter import RateLimiter
from photobooth.services.submission import JobSubmitter
from photobooth.styles import STYLE_PROMPTS


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    rate_limiter: RateLimiter
    transform_pipeline: TransformPipeline
    photo_service: PhotoService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    rate_limiter = RateLimiter(SupabaseRateLimitStore(supabase_client))
    photo_repository = SupabasePhotoRepository(supabase_client)
    flux_client = HttpxFluxClient.create(
        api_key=resolved_settings.bfl_api_key,
        base_url=resolved_settings.bfl_base_url,
        model=resolved_settings.bfl_model,
    )
    materializer = ResultMaterializer(
        downloader=flux_client,
        storage=SupabaseObjectStorage(
            client=supabase_client, bucket=resolved_settings.storage_bucket
        ),
    )
    transform_pipeline = TransformPipeline(
        style_prompts=STYLE_PROMPTS,
        rate_limiter=rate_limiter,
        event_repository=SupabaseEventRepository(supabase_client),
        photo_repository=photo_repository,
        submitter=JobSubmitter(
            client=flux_client, aspect_ratio=resolved_settings.aspect_ratio
        ),
        poller=JobPoller(
            client=flux_client,
            interval_seconds=resolved_settings.poll_interval_seconds,
            backoff_seconds=resolved_settings.poll_backoff_seconds,
        ),
        materializer=materializer,
        poll_timeout_seconds=resolved_settings.poll_timeout_seconds,
        invocation_timeout_seconds=resolved_settings.invocation_timeout_seconds,
    )
    photo_service = PhotoService(
        repository=photo_repository, materializer=materializer
    )

    async def close_resources() -> None:
        await materializer.drain()
        await flux_client.close()

    return AppContainer(
        settings=resolved_settings,
        rate_limiter=rate_limiter,
        transform_pipeline=transform_pipeline,
        photo_service=photo_service,
        close_resources=close_resources,
    )
