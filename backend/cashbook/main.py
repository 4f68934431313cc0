import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cashbook.core.config import settings
from cashbook.api.deps import close_balance_source
from cashbook.api.routes.cashbook import router as cashbook_router

logging.basicConfig(
    level=(settings.log_level or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Cash Book")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(cashbook_router)

@app.on_event("shutdown")
def _close_balance_source():
    close_balance_source()
