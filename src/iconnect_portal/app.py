import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from iconnect_portal import config
from iconnect_portal.routes import admin_routes, auth_routes, member_routes, static_routes, zoom_routes
from iconnect_portal.services.database import init_db
from iconnect_portal.services.utils.logger_config import setup_logging
from iconnect_portal.services.zoom_services import ZoomClient

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables before serving requests"""
    init_db()
    yield


app = FastAPI(title="iConnect Member Portal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(static_routes.router)
app.include_router(auth_routes.router)
app.include_router(member_routes.router)
app.include_router(admin_routes.router)
app.include_router(zoom_routes.router)

# One Zoom client (and token cache) per application instance
app.state.zoom_client = ZoomClient.from_config()


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as a small {"error": ...} object"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def main():
    """Start the FastAPI application using uvicorn"""
    import uvicorn
    setup_logging(logging.INFO)
    _logger.info("Starting iConnect member portal...")
    _logger.info(f"Environment: {config.APP_ENV}")

    uvicorn.run(
        "iconnect_portal.app:app",
        host="0.0.0.0",
        port=8000,
        reload=not config.IS_PRODUCTION,
        log_level="info"
    )


def run():
    """Calls :func:`main` passing the CLI arguments extracted from :obj:`sys.argv`

    This function can be used as entry point to create console scripts with setuptools.
    """
    main()


if __name__ == "__main__":
    # ^  This is a guard statement that will prevent the following code from
    #    being executed in the case someone imports this file instead of
    #    executing it as a script.
    #    https://docs.python.org/3/library/__main__.html

    # After installing your project with pip, users can also run your Python
    # modules as scripts via the ``-m`` flag, as defined in PEP 338::
    #
    #     python -m iconnect_portal.app
    #
    run()
