"""
Row types of the merged site expense view.

Manual rows wrap a persisted SiteExpense; auto rows are derived on every read
from ledger data and never stored. Both expose the same read accessors
(id, site_id, site, expense_date, expense_title, summary, payment_details,
amount, is_auto, source) so the merge step treats them uniformly.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from site_erp.models.site_expense import SiteExpense

MANUAL_SOURCE = "MANUAL"
MATERIAL_SOURCE = "MATERIAL_LEDGER"
LABOUR_SOURCE = "LABOUR_CONTRACTOR_LEDGER"


@dataclass(frozen=True)
class SiteInfo:
    id: str
    site_name: str


class ManualExpenseRow:
    is_auto = False
    source = MANUAL_SOURCE
    auto_source = None

    def __init__(self, expense: SiteExpense):
        self.expense = expense

    @property
    def id(self) -> str:
        return self.expense.id

    @property
    def site_id(self) -> str:
        return self.expense.site_id

    @property
    def site(self):
        return self.expense.site

    @property
    def expense_date(self) -> datetime:
        return self.expense.expense_date

    @property
    def expense_title(self) -> str:
        return self.expense.expense_title or ""

    @property
    def summary(self) -> str:
        return self.expense.summary or ""

    @property
    def payment_details(self) -> Optional[str]:
        return self.expense.payment_details

    @property
    def amount(self) -> Decimal:
        return self.expense.amount

    @property
    def is_deleted(self) -> bool:
        return bool(self.expense.is_deleted)

    @property
    def created_at(self) -> Optional[datetime]:
        return self.expense.created_at


@dataclass(frozen=True)
class AutoExpenseRow:
    id: str
    site: SiteInfo
    expense_date: datetime
    expense_title: str
    summary: str
    payment_details: str
    amount: Decimal
    auto_source: str
    source: str
    is_auto: bool = True
    is_deleted: bool = False
    created_at: Optional[datetime] = None

    @property
    def site_id(self) -> str:
        return self.site.id


ExpenseRow = Union[ManualExpenseRow, AutoExpenseRow]


def sort_expense_rows(rows: Iterable[ExpenseRow]) -> List[ExpenseRow]:
    """Newest expense_date first; equal dates ordered by id ascending."""
    ordered = sorted(rows, key=lambda r: r.id)
    ordered.sort(key=lambda r: r.expense_date, reverse=True)
    return ordered
