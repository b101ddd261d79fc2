# dao/report.py
"""Sales report across the three ledgers.

Normal items count only once their day is finished; grocery and machine
sales are facts and always count.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from configs import db
from dao.errors import ValidationError
from dao.filters import apply_filters, branch_is, date_from as _from, date_to as _to
from db.models.grocery import GrocerySale
from db.models.item import Item, ItemType
from db.models.machine import MachineSale
from db.models.stock import FinishedBatch, StockEntry

REPORT_TYPES = ("item", "type", "branch")


def _row(day, branch, name, item_type, returned, sold, sales):
    return {
        "date": day.isoformat(),
        "branch": branch,
        "itemName": name,
        "itemType": item_type.value,
        "returned": returned,
        "sold": sold,
        "sales": Decimal(str(sales)).quantize(Decimal("0.01")),
    }


def _normal_rows(date_from, date_to, branch, item_name, skip_empty):
    q = (
        db.session.query(StockEntry, Item)
        .join(Item, Item.code == StockEntry.item_code)
        .join(
            FinishedBatch,
            (FinishedBatch.finish_date == StockEntry.stock_date)
            & (FinishedBatch.branch == StockEntry.branch)
            & (FinishedBatch.item_type == ItemType.NORMAL),
        )
        .filter(Item.item_type == ItemType.NORMAL)
    )
    q = apply_filters(
        q,
        _from(StockEntry.stock_date, date_from),
        _to(StockEntry.stock_date, date_to),
        branch_is(StockEntry.branch, branch),
    )
    rows = []
    for entry, item in q.order_by(StockEntry.stock_date, StockEntry.branch, Item.name):
        if item_name and item.name != item_name:
            continue
        sold = entry.available
        if skip_empty and sold <= 0:
            continue
        rows.append(
            _row(entry.stock_date, entry.branch, item.name, ItemType.NORMAL,
                 entry.returned or 0, sold, sold * Decimal(str(item.price or 0)))
        )
    return rows


def _grocery_rows(date_from, date_to, branch, item_name, skip_empty):
    q = apply_filters(
        GrocerySale.query,
        _from(GrocerySale.sale_date, date_from),
        _to(GrocerySale.sale_date, date_to),
        branch_is(GrocerySale.branch, branch),
    )
    rows = []
    for sale in q.order_by(GrocerySale.sale_date, GrocerySale.branch, GrocerySale.id):
        if item_name and sale.item_name != item_name:
            continue
        if skip_empty and sale.sold_qty <= 0:
            continue
        rows.append(
            _row(sale.sale_date, sale.branch, f"{sale.item_name} (Grocery)", ItemType.GROCERY,
                 0, Decimal(str(sale.sold_qty)), sale.total_cash)
        )
    return rows


def _machine_rows(date_from, date_to, branch, item_name, skip_empty):
    q = apply_filters(
        MachineSale.query,
        _from(MachineSale.sale_date, date_from),
        _to(MachineSale.sale_date, date_to),
        branch_is(MachineSale.branch, branch),
    )
    rows = []
    for sale in q.order_by(MachineSale.sale_date, MachineSale.branch, MachineSale.id):
        if item_name and sale.machine_name != item_name:
            continue
        if skip_empty and sale.sold_qty <= 0:
            continue
        rows.append(
            _row(sale.sale_date, sale.branch, f"{sale.machine_name} (Machine)", ItemType.MACHINE,
                 0, sale.sold_qty, sale.total_cash)
        )
    return rows


_SOURCES = {
    ItemType.NORMAL: _normal_rows,
    ItemType.GROCERY: _grocery_rows,
    ItemType.MACHINE: _machine_rows,
}


def sales_report(
    report_type: str = "item",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    branch: Optional[str] = None,
    item_type=None,
    item_name: Optional[str] = None,
) -> dict:
    """Rows of (date, branch, itemName, itemType, returned, sold, sales) and totals.

    ``report_type == "item"`` leaves out rows with nothing sold.
    """
    if report_type not in REPORT_TYPES:
        raise ValidationError(f"Unknown report type: {report_type}", type=report_type)
    if date_from and date_to and date_from > date_to:
        raise ValidationError("dateFrom must not be after dateTo")
    itype = None
    if item_type:
        itype = ItemType.parse(item_type)
        if itype is None:
            raise ValidationError(f"Unknown item type: {item_type}", itemType=item_type)

    skip_empty = report_type == "item"
    data = []
    for t, source in _SOURCES.items():
        if itype and t != itype:
            continue
        data.extend(source(date_from, date_to, branch, item_name, skip_empty))

    totals = {
        "returned": sum(r["returned"] for r in data),
        "sold": sum((Decimal(str(r["sold"])) for r in data), Decimal("0")),
        "sales": sum((r["sales"] for r in data), Decimal("0.00")),
    }
    return {"data": data, "totals": totals}
