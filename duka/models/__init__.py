"""
Database models for Duka Manager.
"""

from .shops import Shop, ShopMember, Profile, MemberRole
from .inventory import Product
from .sales import Sale
from .credit import Customer, CreditSale, CreditPayment, CreditStatus
from .expenses import Expense, ExpenseCategory

__all__ = [
    "Shop", "ShopMember", "Profile", "MemberRole",
    "Product",
    "Sale",
    "Customer", "CreditSale", "CreditPayment", "CreditStatus",
    "Expense", "ExpenseCategory"
]
