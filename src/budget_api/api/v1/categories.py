"""Category endpoints, scoped to a budget the user can access."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.api.deps import get_accessible_budget, get_db
from budget_api.models.budget import Budget
from budget_api.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from budget_api.services.category import CategoryService

router = APIRouter(prefix="/budgets/{budget_id}/categories", tags=["categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
    description="Categories of the budget ordered by display order, then name.",
)
async def list_categories(
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryResponse]:
    categories = await CategoryService(db).list_categories(budget.id)
    return [CategoryResponse.model_validate(category) for category in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CategoryCreate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await CategoryService(db).create(budget.id, data)
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse, summary="Get category")
async def get_category(
    category_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await CategoryService(db).get(budget.id, category_id)
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryResponse, summary="Update category")
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await CategoryService(db).update(budget.id, category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete category",
    description="Rejected with VAL_007 while expenses still use the category.",
)
async def delete_category(
    category_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> None:
    await CategoryService(db).delete(budget.id, category_id)
