from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.database import init_db
from core.errors import register_exception_handlers
from core.logging_config import configure_logging
from core.settings import get_settings
from modules.clients.router import router as clients_router
from modules.costing.router import router as costing_router
from modules.dashboard.router import router as dashboard_router
from modules.finance.router import router as finance_router
from modules.inventory.router import router as inventory_router
from modules.products.router import router as products_router
from modules.projects.router import router as projects_router
from modules.sales.router import router as sales_router
from modules.suppliers.router import router as suppliers_router


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(products_router)
    app.include_router(clients_router)
    app.include_router(suppliers_router)
    app.include_router(projects_router)
    app.include_router(sales_router)
    app.include_router(finance_router)
    app.include_router(inventory_router)
    app.include_router(costing_router)
    app.include_router(dashboard_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


@app.on_event("startup")
def on_startup():
    init_db()
