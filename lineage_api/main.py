from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .middleware import IdentityMiddleware
from .routes import auth as auth_routes
from .routes import persons as persons_routes
from .routes import photos as photos_routes
from .routes import relatives as relatives_routes
from .settings import get_settings

app = FastAPI(title="Lineage Registry API", version="0.1.0")

app.add_middleware(IdentityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(persons_routes.router)
app.include_router(relatives_routes.router)
app.include_router(photos_routes.router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"ok": "true"}
