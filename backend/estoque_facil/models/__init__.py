from .auth import User
from .inventory import Product
from .sales import Sale
from .settings import Setting

__all__ = [
    'User',
    'Product',
    'Sale',
    'Setting',
]
