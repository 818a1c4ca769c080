import os

# Origens liberadas no CORS (front-end do assistente de orçamento)
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

APP_TITLE = os.getenv("APP_TITLE", "Orçamentos - Motor de Precificação")
