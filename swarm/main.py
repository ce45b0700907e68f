import logging
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from swarm.config import get_settings
from swarm.errors import NotFound, ValidationFailed
from swarm.api import agents, trades, risk, configurations

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Trading Swarm API",
    description="Trading agents, their trades, risk events and system configuration",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationFailed)
def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=exc.as_dict())


@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


# Include routers
app.include_router(agents.router, prefix="/api/v1/agents", tags=["Agents"])
app.include_router(trades.router, prefix="/api/v1/trading", tags=["Trading"])
app.include_router(risk.router, prefix="/api/v1/risk", tags=["Risk"])
app.include_router(configurations.router, prefix="/api/v1/configurations", tags=["Configurations"])


@app.get("/")
def root():
    return {"message": "Welcome to Trading Swarm API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
