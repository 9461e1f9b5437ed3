import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager

from core.config import settings
from core.errors import add_exception_handlers
from core.logging import setup_logging, get_logger
from create_tables import create_tables

from modules.auth.controllers.auth_controller import router as auth_router
from modules.contracts.controllers.contract_controller import router as contract_router
from modules.contracts.controllers.signer_controller import router as signer_router
from modules.users.controllers.user_controller import router as user_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup logic ---
    setup_logging()
    create_tables()
    logger.info(f"Contract signing API starting ({settings.ENVIRONMENT})")
    yield
    # --- Shutdown logic ---
    logger.info("Contract signing API stopped")


app = FastAPI(
    title="Contract Signing API",
    description="Contract creation, signer invitations and blockchain-anchored signatures",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=[
        "Accept",
        "Accept-Language",
        "Content-Language",
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Origin",
    ],
    max_age=86400,
)

add_exception_handlers(app)


@app.get("/healthz", response_class=PlainTextResponse, include_in_schema=False)
def healthz():
    return "Contract signing API up and running"


# Routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(contract_router)
app.include_router(signer_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=not settings.is_production)
