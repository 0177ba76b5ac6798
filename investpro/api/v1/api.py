"""
V1 API router aggregation.

All versioned endpoint routers are mounted here under a common prefix.
The top-level ``main.py`` mounts this router at ``/api/v1``.
"""

from fastapi import APIRouter

from investpro.api.v1.endpoints import companies, dashboard, demo, investments, investors

api_router = APIRouter()

api_router.include_router(companies.router, prefix="/companies", tags=["Companies"])
api_router.include_router(investments.router, prefix="/investments", tags=["Investments"])
api_router.include_router(investors.router, prefix="/investors", tags=["Investors"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(demo.router, prefix="/demo", tags=["Demo"])
