from .catalog import CatalogItem
from .sales import SaleRecord, SaleLine
from .expenses import ExpenseRecord
from .auth import UserCredential
from .sync import QueuedMutation

__all__ = [
    'CatalogItem',
    'SaleRecord', 'SaleLine',
    'ExpenseRecord',
    'UserCredential',
    'QueuedMutation',
]
