"""Database models."""
from budget_api.models.user import User
from budget_api.models.budget import AggregatorProvider, BankConnection, Budget, BudgetMember, MemberRole
from budget_api.models.category import Category
from budget_api.models.expense import Expense
from budget_api.models.invite import Invite
from budget_api.models.networth import Asset, AssetType, Liability, LiabilityType

__all__ = [
    "User",
    "Budget",
    "BudgetMember",
    "BankConnection",
    "MemberRole",
    "AggregatorProvider",
    "Category",
    "Expense",
    "Invite",
    "Asset",
    "AssetType",
    "Liability",
    "LiabilityType",
]
