from contextlib import asynccontextmanager
import logging

from app.ai.config import load_ai_config
from app.ai.factory import get_ai_client
from app.core.config import Settings, settings
from app.parsing.parse import ResumeExtractor
from app.services.cv_match_service import CvMatchService
from app.services.file_store import TransientFileStore
from app.services.job_search import AdzunaJobSearch
from app.services.title_inference import TitleInferenceEngine

logger = logging.getLogger(__name__)


def build_cv_match_service(cfg: Settings) -> CvMatchService:
    file_store = TransientFileStore(cfg.scratch_dir)
    file_store.ensure_scratch_dir()

    if not (cfg.adzuna_app_id and cfg.adzuna_app_key):
        logger.warning("adzuna_credentials_missing country=%s", cfg.adzuna_country)

    return CvMatchService(
        file_store=file_store,
        extractor=ResumeExtractor(),
        title_engine=TitleInferenceEngine(
            get_ai_client(load_ai_config(cfg)),
            timeout_s=cfg.model_timeout_s,
            max_prompt_chars=cfg.prompt_max_chars,
        ),
        job_search=AdzunaJobSearch(
            app_id=cfg.adzuna_app_id,
            app_key=cfg.adzuna_app_key,
            country=cfg.adzuna_country,
            base_url=cfg.adzuna_base_url,
            timeout_s=cfg.search_timeout_s,
        ),
    )


@asynccontextmanager
async def lifespan(app):
    app.state.cv_match_service = build_cv_match_service(settings)
    logger.info(
        "startup_complete provider=%s model=%s scratch_dir=%s",
        settings.ai_provider,
        settings.ai_model,
        app.state.cv_match_service.file_store.scratch_dir,
    )
    yield
