"""REST API for the draft assistant."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..exceptions import InvalidQueryError, UpstreamUnavailableError
from ..models.projection_service import ProjectionQuery, ProjectionService, parse_seasons

logger = logging.getLogger(__name__)


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


def create_app(service: Optional[ProjectionService] = None) -> FastAPI:
    """Build the FastAPI app around a single ProjectionService.

    The service (and the caches it owns) lives as long as the app.
    """
    app = FastAPI(title="Fantasy draft assistant")
    app.state.service = service or ProjectionService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(UpstreamUnavailableError)
    async def upstream_unavailable(request: Request, exc: UpstreamUnavailableError):
        logger.warning(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error serving {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    def health() -> dict:
        return {"status": "healthy"}

    @app.get("/api/projections")
    def projections(
        preset: Optional[str] = Query(None, description="PPR, HALF_PPR or STANDARD"),
        pass_td: Optional[int] = Query(None, alias="passTd"),
        pos: Optional[str] = Query(None, description="QB, RB, WR, TE or ALL"),
        ids: Optional[str] = Query(None, description="Comma-separated player ids"),
        exclude: Optional[str] = Query(None, description="Comma-separated player ids to leave out"),
        limit: Optional[int] = Query(None),
        games: Optional[int] = Query(None, description="Rank by season total over this many games"),
        seasons: Optional[str] = Query(None),
        fast: bool = Query(False),
    ) -> dict:
        try:
            query = ProjectionQuery.from_params(
                preset=preset,
                pass_td=pass_td,
                position=pos,
                ids=ids,
                exclude=exclude,
                limit=limit,
                games=games,
                seasons=seasons,
                fast=fast,
                settings=app.state.service.settings,
            )
        except InvalidQueryError as exc:
            raise _bad_request(exc) from exc

        result = app.state.service.get_projections(query)
        return result.model_dump(mode="json", by_alias=True)

    @app.get("/api/players/list")
    def list_players(pos: Optional[str] = Query(None)) -> dict:
        players = app.state.service.list_players(pos)
        return {"players": [p.model_dump() for p in players]}

    @app.get("/api/players/search")
    def search_players(q: Optional[str] = Query(None)) -> dict:
        try:
            results = app.state.service.search_players(q)
        except InvalidQueryError as exc:
            raise _bad_request(exc) from exc
        return {"results": [p.model_dump() for p in results]}

    @app.get("/api/players/by-id")
    def player_by_id(id: Optional[str] = Query(None)) -> dict:
        try:
            player = app.state.service.get_player(id)
        except InvalidQueryError as exc:
            raise _bad_request(exc) from exc
        return {"player": player.model_dump() if player else None}

    @app.get("/api/stats/{player_id}")
    def weekly_stats(player_id: str, seasons: Optional[str] = Query(None)) -> dict:
        try:
            weeks = app.state.service.get_player_weekly_history(player_id, parse_seasons(seasons))
        except InvalidQueryError as exc:
            raise _bad_request(exc) from exc
        return {"weeks": [w.model_dump() for w in weeks]}

    return app
