"""Entry point for the FastAPI-powered content API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Iterable, Mapping

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .database import Database
from .models import PageQuery
from .services.content_service import ContentQueryError, ContentService
from .services.page_fetcher import PageFetcher

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    database = Database(settings.database_url)
    await database.create_all()

    fastapi_app.state.database = database
    fastapi_app.state.content_services = {
        definition.resource: ContentService(
            definition, database.session_factory, page_size=settings.page_size
        )
        for definition in settings.content_type_definitions
    }

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Paginated movie, show and anime listings",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_error_handlers(fastapi_app)
    register_routes(
        fastapi_app,
        [definition.resource for definition in settings.content_type_definitions],
    )
    return fastapi_app


def get_content_service(fastapi_app: FastAPI, resource: str) -> ContentService:
    services: Mapping[str, ContentService] | None = getattr(
        fastapi_app.state, "content_services", None
    )
    if services is None:
        raise RuntimeError("Content services not initialised")
    service = services.get(resource)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource: {resource}")
    return service


def register_error_handlers(fastapi_app: FastAPI) -> None:
    @fastapi_app.exception_handler(ContentQueryError)
    async def content_query_error(request: Request, exc: ContentQueryError) -> JSONResponse:
        logger.warning("Rejected content query for %s: %s", request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=400)

    @fastapi_app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(
            "Content storage failed for %s", request.url.path, exc_info=exc
        )
        return JSONResponse(
            {"detail": "Content storage unavailable"}, status_code=503
        )


def _content_response(content: Any) -> Response:
    if not content:
        return Response(status_code=204)
    return JSONResponse(content)


def register_routes(fastapi_app: FastAPI, resources: Iterable[str]) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    for resource in resources:
        _register_resource_routes(fastapi_app, resource)


def _register_resource_routes(fastapi_app: FastAPI, resource: str) -> None:
    async def get_contents() -> Response:
        service = get_content_service(fastapi_app, resource)
        return _content_response(await service.get_contents())

    async def get_page(request: Request, page: str) -> Response:
        service = get_content_service(fastapi_app, resource)
        params = PageQuery.from_request(request.query_params)
        return await PageFetcher(service).fetch_page(page, params)

    async def get_content(content_id: str) -> Response:
        service = get_content_service(fastapi_app, resource)
        return _content_response(await service.get_content(content_id))

    async def get_random_content() -> Response:
        service = get_content_service(fastapi_app, resource)
        return _content_response(await service.get_random_content())

    fastapi_app.add_api_route(f"/{resource}s", get_contents, methods=["GET"])
    fastapi_app.add_api_route(f"/{resource}s/{{page}}", get_page, methods=["GET"])
    fastapi_app.add_api_route(
        f"/{resource}/{{content_id}}", get_content, methods=["GET"]
    )
    fastapi_app.add_api_route(
        f"/random/{resource}", get_random_content, methods=["GET"]
    )


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
