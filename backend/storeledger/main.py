import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storeledger import __version__
from storeledger.api.v1.router import api_router
from storeledger.core.config import settings
from storeledger.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME, version=__version__)

    # POS terminals and the back-office UI are served from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*", settings.STORE_HEADER],
    )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    logger.info("%s %s ready (env=%s)", settings.PROJECT_NAME, __version__, settings.ENVIRONMENT)
    return app


app = create_app()
