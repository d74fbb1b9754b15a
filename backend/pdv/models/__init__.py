from .auth import User, ROLES, ROLE_ADMIN, ROLE_MANAGER, ROLE_SELLER, MANAGEMENT_ROLES
from .catalog import Product
from .sales import Sale, SaleItem, PAYMENT_METHODS, PAYMENT_CARD, PAYMENT_CASH, PAYMENT_PIX

__all__ = [
    'User', 'ROLES', 'ROLE_ADMIN', 'ROLE_MANAGER', 'ROLE_SELLER', 'MANAGEMENT_ROLES',
    'Product',
    'Sale', 'SaleItem', 'PAYMENT_METHODS', 'PAYMENT_CARD', 'PAYMENT_CASH', 'PAYMENT_PIX',
]
