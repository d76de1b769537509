import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from roadblock.config import Settings, get_settings
from roadblock.database import build_engine, build_session_factory, init_db
from roadblock.errors import FALLBACK_ERROR_MESSAGE, AuthenticationRequired, BadRequest, NotFound
from roadblock.routers.auth import router as auth_router
from roadblock.routers.drivers import router as drivers_router
from roadblock.routers.vehicles import router as vehicles_router
from roadblock.sessions import SessionManager

logger = logging.getLogger(__name__)


def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    query = urlencode({'redirect_to': exc.redirect_to})
    return RedirectResponse(f'/login?{query}', status_code=status.HTTP_303_SEE_OTHER)


def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={'error_message': exc.message})


def bad_request_handler(request: Request, exc: BadRequest):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'error_message': exc.message})


def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error_message': FALLBACK_ERROR_MESSAGE},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    app = FastAPI(
        title="Smart Road Block"
    )

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.session_manager = SessionManager(settings)

    app.add_exception_handler(AuthenticationRequired, authentication_required_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(BadRequest, bad_request_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(auth_router)
    app.include_router(vehicles_router)
    app.include_router(drivers_router)

    return app


def run():
    import uvicorn

    uvicorn.run('roadblock.main:create_app', factory=True, host='0.0.0.0', port=8000)


if __name__ == '__main__':
    run()
