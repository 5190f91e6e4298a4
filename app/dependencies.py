import logging
from functools import lru_cache

from app.errors import PipelineConfigError
from app.services.prompt_service import PromptService
from app.settings import get_settings
from promptcore.factory import adjuster_from_config, pipeline_from_config

log = logging.getLogger(__name__)


@lru_cache()
def get_prompt_service() -> PromptService:
    """
    Singleton-ish PromptService for the FastAPI app.

    Pipeline and adjuster are built once from the YAML config named by
    Settings.prompt_config_path; the adjuster owns the process-wide
    insights cache.
    """
    settings = get_settings()
    path = settings.prompt_config_path
    try:
        pipeline = pipeline_from_config(path)
        adjuster = adjuster_from_config(path)
    except (OSError, ValueError) as exc:
        log.error("Failed to build prompt pipeline from %s: %s", path, exc)
        raise PipelineConfigError(
            f"Invalid prompt configuration: {path}", details=[str(exc)]
        ) from exc
    return PromptService(settings=settings, pipeline=pipeline, adjuster=adjuster)
