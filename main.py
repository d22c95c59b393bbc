from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402

from apis.google_ads_api import router as google_ads_router  # noqa: E402
from config.logging_config import setup_logging  # noqa: E402
from core.infrastructure.lifecycle import lifespan  # noqa: E402
from core.metadata import APP_TITLE, VERSION  # noqa: E402
from exceptions.handlers import setup_exception_handlers  # noqa: E402

setup_logging()

app = FastAPI(title=APP_TITLE, version=VERSION, lifespan=lifespan)

app.include_router(google_ads_router)

setup_exception_handlers(app)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}
