import asyncio
import contextlib
import logging
import os
import sys
import random

# Add current directory to path so we can import backend modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from typing import Any, Dict, List, Optional, Union
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, confloat, conint

from agents import create_agent, create_population
from config import CONFIG
from economy import Economy, compute_population_stats
from events import EconomyState

# Load environment variables from .env
load_dotenv()

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DEFAULT_RECESSION = _env_flag("SIM_RECESSION", CONFIG.recession)
DEFAULT_TOTAL_MONTHS = int(os.getenv("SIM_TOTAL_MONTHS", CONFIG.time.total_months))
DEFAULT_TICK_DELAY = float(os.getenv("SIM_TICK_DELAY", CONFIG.time.tick_delay_seconds))

app = FastAPI(title="Rent Runway Backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Request/Response Models ----------

class AgentProfileModel(BaseModel):
    name: str
    risk_tolerance: confloat(ge=0, le=1)
    discipline: confloat(ge=0, le=1)
    intelligence: confloat(ge=0, le=1)
    color: str = "#ffffff"
    side_hustle: bool = False

class SimulationRequest(BaseModel):
    recession: bool = DEFAULT_RECESSION
    total_months: conint(gt=0) = DEFAULT_TOTAL_MONTHS
    seed: Optional[int] = None
    agents: Optional[List[AgentProfileModel]] = None

class SimulationResponse(BaseModel):
    recession: bool
    total_months: int
    months: List[Dict[str, Any]]
    stats: Dict[str, Union[int, float]]

# ---------- Helpers ----------

def build_economy(
    recession: bool,
    total_months: int,
    seed: Optional[int] = None,
    profiles: Optional[List[AgentProfileModel]] = None,
) -> Economy:
    if profiles:
        agents = [
            create_agent(
                p.name, p.risk_tolerance, p.discipline, p.intelligence, p.color,
                side_hustle=p.side_hustle
            )
            for p in profiles
        ]
    else:
        agents = create_population()
    return Economy(
        agents,
        economy_state=EconomyState(recession=recession),
        rng=random.Random(seed),
        total_months=total_months,
    )


class SimulationManager:
    def __init__(self):
        self.economy: Optional[Economy] = None
        self.is_running = False
        self.tick_delay = DEFAULT_TICK_DELAY
        self.active_websocket: Optional[WebSocket] = None
        self.task: Optional[asyncio.Task] = None

    def start(self):
        self.is_running = True
        self.task = asyncio.create_task(self.run_loop())

    async def stop(self):
        """Stop the running loop and wait until it has fully exited."""
        self.is_running = False
        task, self.task = self.task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def initialize(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}

        request = SimulationRequest(**{k: v for k, v in config.items() if k != "tick_delay"})
        self.tick_delay = max(0.0, float(config.get("tick_delay", DEFAULT_TICK_DELAY)))

        logger.info(
            f"Initializing economy for {request.total_months} months (recession={request.recession})"
        )
        self.economy = build_economy(
            request.recession, request.total_months, request.seed, request.agents
        )
        logger.info("Economy initialized")

    async def run_loop(self):
        if not self.economy:
            logger.warning("Attempted to run loop without economy. Waiting for SETUP.")
            return

        logger.info("Starting simulation loop")
        try:
            while self.is_running and self.active_websocket:
                if self.economy.is_finished:
                    self.is_running = False
                    await self.active_websocket.send_json({
                        "type": "FINISHED",
                        "month": self.economy.current_month,
                        "stats": compute_population_stats(self.economy.agents),
                    })
                    break

                snapshot = self.economy.step()
                await self.active_websocket.send_json({"type": "TICK", **snapshot.to_dict()})

                await asyncio.sleep(self.tick_delay)

        except Exception as e:
            logger.error(f"Simulation loop error: {e}")
            self.is_running = False
            if self.active_websocket:
                await self.active_websocket.send_json({"error": str(e)})

manager = SimulationManager()

# ---------- API Endpoints ----------

@app.get("/health")
async def health():
    return {"status": "ok"}

@app.post("/simulate", response_model=SimulationResponse)
async def simulate(req: SimulationRequest):
    try:
        economy = build_economy(req.recession, req.total_months, req.seed, req.agents)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    history = economy.run()
    return SimulationResponse(
        recession=req.recession,
        total_months=req.total_months,
        months=[snapshot.to_dict() for snapshot in history],
        stats=compute_population_stats(economy.agents),
    )

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    manager.active_websocket = websocket
    logger.info("WebSocket connected")

    try:
        while True:
            data = await websocket.receive_json()
            command = data.get("command")

            if command == "SETUP":
                config = data.get("config", {})
                if not isinstance(config, dict):
                    await websocket.send_json({"error": "config must be an object"})
                    continue
                await manager.stop()
                try:
                    manager.initialize(config)
                except ValueError as e:
                    await websocket.send_json({"error": str(e)})
                    continue
                await websocket.send_json({"type": "SETUP_COMPLETE"})
            elif command == "START":
                if not manager.economy:
                    # Auto-initialize with defaults if SETUP was skipped
                    manager.initialize()

                if not manager.is_running:
                    await manager.stop()
                    manager.start()
            elif command == "STOP":
                await manager.stop()
            elif command == "RESET":
                await manager.stop()
                manager.economy = None
                await websocket.send_json({"type": "RESET", "month": 0})
            else:
                await websocket.send_json({"error": f"Unknown command: {command}"})

    except WebSocketDisconnect:
        manager.active_websocket = None
        await manager.stop()
        logger.info("Client disconnected")
