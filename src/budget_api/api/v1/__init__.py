"""API version 1 routes."""

from fastapi import APIRouter

from budget_api.api.v1 import auth, bank, budgets, categories, expenses, invites, networth

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(auth.router)
router.include_router(budgets.router)
router.include_router(invites.router)
router.include_router(categories.router)
router.include_router(expenses.router)
router.include_router(networth.router)
router.include_router(bank.router)
