from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.session import settings
from app.errors import install_error_handlers
from app.logging_config import configure_logging
from app.routers.inventory_router import router as inventory_router
from app.routers.reference_router import router as reference_router
from app.routers.sales_router import router as sales_router

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="StorePulse Analytics API")
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_methods=["GET"], allow_headers=["*"])
install_error_handlers(app)

@app.get("/")
def root():
    return {"ok": True, "service": "storepulse", "module": "reports"}

app.include_router(sales_router, prefix="/api", tags=["sales"])
app.include_router(inventory_router, prefix="/api", tags=["inventory"])
app.include_router(reference_router, prefix="/api", tags=["reference"])
