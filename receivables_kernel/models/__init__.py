"""ORM models. Importing this package registers every table on Base.metadata."""

from receivables_kernel.models.collection import (
    CollectionAllocationModel,
    CollectionChequeModel,
    CollectionModel,
)
from receivables_kernel.models.customer import CustomerModel
from receivables_kernel.models.invoice import InvoiceItemModel, InvoiceModel
from receivables_kernel.models.returns import ReturnItemModel, ReturnModel

__all__ = [
    "CollectionAllocationModel",
    "CollectionChequeModel",
    "CollectionModel",
    "CustomerModel",
    "InvoiceItemModel",
    "InvoiceModel",
    "ReturnItemModel",
    "ReturnModel",
]
