from .enums import (
    Role, BarberStatus, HaircutStatus, ApprovalStatus, PaymentMethod,
    AppointmentStatus, ExpenseType, EXPENSE_CATEGORIES, PRODUCT_CATEGORIES,
)
from .tenancy import Shop
from .auth import User, SessionToken
from .catalog import Service
from .haircuts import HaircutRecord
from .inventory import Product, SaleRecord
from .expenses import Expense
from .appointments import Appointment
from .audit import AuditEvent

__all__ = [
    'Role', 'BarberStatus', 'HaircutStatus', 'ApprovalStatus', 'PaymentMethod',
    'AppointmentStatus', 'ExpenseType', 'EXPENSE_CATEGORIES', 'PRODUCT_CATEGORIES',
    'Shop',
    'User', 'SessionToken',
    'Service',
    'HaircutRecord',
    'Product', 'SaleRecord',
    'Expense',
    'Appointment',
    'AuditEvent',
]
