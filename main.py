import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import APP_TITLE, CORS_ORIGINS, LOG_LEVEL
from routers.orcamento import router as orcamento_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=APP_TITLE,
    description="Totais, tributos por item e precificação de orçamentos",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orcamento_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": APP_TITLE}
