from .actions import mark_inv_as_paid, mark_inv_as_unpaid
from .auditlog import AuditLogAdmin
from .customer import CustomerAdmin
from .invoice import InvoiceAdmin
from .mixins import OwnerAdminMixin
from .payment import PaymentAdmin
from .quote import QuoteAdmin
from .ReadOnly import ReadOnlyAdmin
