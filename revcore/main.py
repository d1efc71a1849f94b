"""Main FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from revcore import __version__
from revcore.config import settings
from revcore.goals import routes as goal_routes
from revcore.invoices import routes as invoice_routes
from revcore.middleware import setup_error_handlers, setup_rate_limiting
from revcore.receivables import routes as receivable_routes
from revcore.revenue import routes as revenue_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title="Revcore API",
    description="Revenue derivation for a subscription business - MRR, receivables, waterfall, commissions, goals",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_rate_limiting(app)
setup_error_handlers(app)

# Include routers
app.include_router(revenue_routes.router, prefix=f"{settings.API_V1_PREFIX}/revenue", tags=["Revenue"])
app.include_router(receivable_routes.router, prefix=f"{settings.API_V1_PREFIX}/receivables", tags=["Receivables"])
app.include_router(invoice_routes.router, prefix=f"{settings.API_V1_PREFIX}/invoices", tags=["Invoices"])
app.include_router(goal_routes.router, prefix=f"{settings.API_V1_PREFIX}/goals", tags=["Goals"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Revcore API",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "revcore.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
