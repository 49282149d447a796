"""
REST API for the reload evaluator.

Lets an external scheduler post agent snapshots and get reload decisions
back without embedding Python.

Run with:
    python -m reload_engine.api --catalog catalog.yaml --port 8000
"""
from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import DEFAULT_RELOAD_CONFIG, ReloadConfig, get_preset, list_presets
from .decision import CommitLinkPreparer, ReloadJobGiver, evaluate_reload_need
from .snapshot import AmmoCatalog, agent_from_dict, read_document
from .types import Agent
from .validation import SnapshotError

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


# ============================================================================
# Pydantic Models for API
# ============================================================================

class SnapshotRequest(BaseModel):
    """Request body carrying one agent snapshot."""
    snapshot: Dict[str, Any] = Field(..., description="Agent snapshot document")
    preset: Optional[str] = Field(None, description="Config preset to evaluate with")


class LinkModel(BaseModel):
    label: str = ""
    adders: List[Dict[str, Any]] = []


class DecisionResponse(BaseModel):
    """Reload decision for one agent."""
    agent_id: str
    needed: bool
    weapon: Optional[str] = None
    link: Optional[LinkModel] = None
    reason: str
    branch: Optional[str] = None
    priority: float


class PriorityResponse(BaseModel):
    agent_id: str
    priority: float


class JobResponse(BaseModel):
    """Reload job, or job=None when there is nothing to do."""
    agent_id: str
    job: Optional[Dict[str, Any]] = None


# ============================================================================
# API Server
# ============================================================================

class ReloadAPIServer:
    """
    FastAPI-based REST server for reload decisions.

    Snapshots are evaluated per request and never stored.
    """

    def __init__(
        self,
        catalog: Optional[AmmoCatalog] = None,
        config: Optional[ReloadConfig] = None,
    ):
        """
        Initialize the API server.

        Args:
            catalog: Shared ammo catalog for snapshots without their own
            config: Default config when a request names no preset
        """
        self.catalog = catalog or AmmoCatalog()
        self.config = config or DEFAULT_RELOAD_CONFIG

        self.app = FastAPI(
            title="Reload Engine API",
            description="Reload decisions for agent snapshots",
            version=API_VERSION,
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._register_routes()

    def _config_for(self, preset: Optional[str]) -> ReloadConfig:
        if not preset:
            return self.config
        config = get_preset(preset)
        if config is None:
            raise HTTPException(status_code=404, detail=f"Unknown preset: {preset}")
        return config

    def _agent_for(self, snapshot: Dict[str, Any]) -> Agent:
        try:
            return agent_from_dict(snapshot, self.catalog)
        except SnapshotError as e:
            logger.info(f"Rejected snapshot: {len(e.result.errors)} error(s)")
            raise HTTPException(status_code=422, detail=e.result.messages())

    def _register_routes(self):
        """Register all API routes."""

        @self.app.get("/")
        async def root():
            """API health check."""
            return {
                "status": "ok",
                "engine": "Reload Engine",
                "version": API_VERSION,
                "catalog_kinds": len(self.catalog),
            }

        @self.app.get("/presets", response_model=List[str])
        async def get_presets():
            """List available config presets."""
            return list_presets()

        @self.app.post("/evaluate", response_model=DecisionResponse)
        async def evaluate(request: SnapshotRequest):
            """Evaluate a snapshot and report the decision with its priority."""
            config = self._config_for(request.preset)
            agent = self._agent_for(request.snapshot)

            decision = evaluate_reload_need(agent)
            priority = ReloadJobGiver(config).get_priority(agent)

            return DecisionResponse(
                agent_id=agent.agent_id,
                priority=priority,
                **decision.to_dict(),
            )

        @self.app.post("/priority", response_model=PriorityResponse)
        async def priority(request: SnapshotRequest):
            """Priority the scheduler should give the reload job."""
            config = self._config_for(request.preset)
            agent = self._agent_for(request.snapshot)
            return PriorityResponse(
                agent_id=agent.agent_id,
                priority=ReloadJobGiver(config).get_priority(agent),
            )

        @self.app.post("/job", response_model=JobResponse)
        async def job(request: SnapshotRequest):
            """Build the reload job, committing the chosen link on the snapshot copy."""
            config = self._config_for(request.preset)
            agent = self._agent_for(request.snapshot)
            built = ReloadJobGiver(config).try_give_job(agent, CommitLinkPreparer())
            return JobResponse(
                agent_id=agent.agent_id,
                job=built.to_dict() if built else None,
            )


def create_app(
    catalog: Optional[AmmoCatalog] = None,
    config: Optional[ReloadConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    return ReloadAPIServer(catalog=catalog, config=config).app


app = create_app()


def main(argv: Optional[List[str]] = None):
    import uvicorn

    from .logging_config import configure_logging

    ap = argparse.ArgumentParser(description="Reload Engine API server")
    ap.add_argument("--catalog", help="Shared ammo catalog (.json or .yaml)")
    ap.add_argument("--config", help="ReloadConfig file (.json or .yaml)")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    config = None
    if args.config:
        config = ReloadConfig.load(args.config)
        if config is None:
            ap.error(f"cannot load config {args.config}")

    configure_logging(level=args.log_level)

    catalog = AmmoCatalog.from_dict(read_document(args.catalog)) if args.catalog else None

    uvicorn.run(create_app(catalog, config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
