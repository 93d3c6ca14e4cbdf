import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pravis.core.config import settings
from pravis.core.logging import setup_logging
from pravis.api.routes import agent, chat, flows, general

setup_logging()
logger = logging.getLogger("pravis.main")

app = FastAPI(title="Pravis Assistant API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(general.router, prefix="/api", tags=["General"])
app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
app.include_router(agent.router, prefix="/api/agent", tags=["Agent"])
app.include_router(flows.router, prefix="/api/flows", tags=["Flows"])

logger.info(f"Pravis API ready | llm_backend={settings.llm_backend}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
