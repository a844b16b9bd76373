from typing import Annotated
from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.orm import Session

from .deps import get_db
from .logging_setup import log_requests
from .routers import subscriptions

app = FastAPI(title="Subscription Service")

DbSession = Annotated[Session, Depends(get_db)]

app.middleware("http")(log_requests)

app.include_router(subscriptions.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/db-check")
def db_check(db: DbSession):
    _ = db.execute(text("SELECT 1"))
    return {"db": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
