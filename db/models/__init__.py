from .user import User
from .branch import Branch
from .item import Item

from .stock import StockEntry, FinishedBatch
from .grocery import GroceryBatch, GrocerySale, GroceryReturn
from .machine import MachineBatch, MachineSale
from .transfer import Transfer
from .cash import CashEntry
from .activity import Activity

__all__ = [n for n in dir() if n[:1].isupper()]
