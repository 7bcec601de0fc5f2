"""RiskGuard Transaction Risk Decision API.

Evaluates every proposed money transfer before it is committed. A fixed
linear behavioral model is combined with deterministic banking policy
rules (limits, timing, device trust) into a block/allow decision with
explainable reasons.

Run with:
    python3 -m uvicorn riskguard.main:app --host 0.0.0.0 --port 8000
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List

from fastapi import FastAPI

from riskguard.models import Account, RiskModelConfig
from riskguard.routes import accounts, risk_config, screening, security, transactions
from riskguard.screening.engine import DecisionEngine
from riskguard.services.transactions import TransactionService
from riskguard.storage.memory import MemoryStore

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# Resolve the data/ directory relative to this file so the server works
# regardless of which directory uvicorn is launched from.
DATA_DIR = Path(__file__).parent.parent / "data"

app = FastAPI(
    title="RiskGuard Transaction Risk Decision API",
    description=(
        "Real-time fraud and anomaly screening for money transfers. "
        "Combines a weighted behavioral risk score with daily limit, "
        "per-transaction limit, suspicious hour, new device, and savings "
        "withdrawal policy rules."
    ),
    version="1.0.0",
)


def load_risk_config(data_dir: Path = DATA_DIR) -> RiskModelConfig:
    """Load the risk model table from data/risk_config.json, or use defaults."""
    path = data_dir / "risk_config.json"
    if path.exists():
        with open(path, "r") as f:
            return RiskModelConfig(**json.load(f))
    return RiskModelConfig()


def load_accounts(data_dir: Path = DATA_DIR) -> List[Account]:
    """Load the accounts the store starts with from data/accounts.json."""
    path = data_dir / "accounts.json"
    if not path.exists():
        return []
    with open(path, "r") as f:
        return [Account(**raw) for raw in json.load(f)]


@app.on_event("startup")
async def startup() -> None:
    """Load reference data and build the store, engine and service."""
    config = load_risk_config()

    # The store is created once here; nothing reseeds it afterwards
    store = MemoryStore()
    for account in load_accounts():
        store.add_account(account)

    engine = DecisionEngine(config=config)
    service = TransactionService(store=store, engine=engine)

    # Attach to app state for dependency injection in routes
    app.state.config = config
    app.state.store = store
    app.state.engine = engine
    app.state.service = service

    logger.info("Risk model %s loaded", config.version)


# Mount all API routers
app.include_router(transactions.router)
app.include_router(screening.router)
app.include_router(accounts.router)
app.include_router(security.router)
app.include_router(risk_config.router)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy"}
