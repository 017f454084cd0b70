import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routes.clips import router as clips_router
from services.config import ClipSettings
from services.delivery import ArtifactDelivery
from services.pipeline import ClipPipeline

# Load .env from backend dir before settings are read
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))
logging.basicConfig(level=os.environ.get("CLIP_LOG_LEVEL", "INFO").upper())


def create_app(pipeline: ClipPipeline | None = None) -> FastAPI:
    pipeline = pipeline or ClipPipeline(ClipSettings.from_env())

    application = FastAPI(title="Vertical Clipper API", version="0.1.0")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.state.pipeline = pipeline
    application.state.delivery = ArtifactDelivery(
        pipeline.workspace, download_name=pipeline.settings.download_filename
    )
    application.include_router(clips_router, prefix="/api")

    @application.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "8000")))
