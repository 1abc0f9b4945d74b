from .auditlog import AuditLog
from .customer import Customer
from .invoice import Invoice
from .payment import Payment
from .quote import Quote
