import fastapi
from errors import install_error_handlers
from . import health, auth, dashboard

def include_routers(app: fastapi.FastAPI) -> fastapi.FastAPI:
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    return install_error_handlers(app)
