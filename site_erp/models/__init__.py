# site_erp/models/__init__.py
from .site import Site, SiteStatus
from .site_expense import SiteExpense
from .site_transaction import SiteTransaction, TxnNature, TxnSource
from .ledger import Ledger, LedgerType
from .material_supplier_ledger import MaterialSupplierLedger
from .labour import LabourContractor, LabourContract, LabourPayment, PaymentMode
from .audit_log import AuditLog, AuditAction
