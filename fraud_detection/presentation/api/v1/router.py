from fastapi import APIRouter

from .health import health_router
from .transaction import transaction_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(transaction_router, tags=["Transactions"])
