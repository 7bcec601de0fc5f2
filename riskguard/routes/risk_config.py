"""Risk model configuration endpoints for reading and replacing weights/thresholds."""

import logging

from fastapi import APIRouter, Request

from riskguard.models import RiskModelConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/risk-config", response_model=RiskModelConfig)
async def get_risk_config(request: Request) -> RiskModelConfig:
    """Return the active risk model configuration."""
    return request.app.state.config


@router.put("/risk-config", response_model=RiskModelConfig)
async def update_risk_config(
    new_config: RiskModelConfig,
    request: Request,
) -> RiskModelConfig:
    """Replace the risk model configuration.

    Updates both the app-level config and the engine's reference so the
    next evaluation uses the new table. Weights that do not sum to 1.0 are
    rejected with 422 before reaching this handler.
    """
    request.app.state.config = new_config
    request.app.state.engine.config = new_config
    logger.info("Risk model configuration replaced (version %s)", new_config.version)
    return new_config
