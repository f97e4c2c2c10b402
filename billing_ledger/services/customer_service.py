"""
Customer service: lookup, creation, and name-based resolution.

Customers are matched on their normalized name only: casefolded
and whitespace-collapsed. There is no fuzzy matching, so
"Al Noor Trading" and "Al-Noor Trading" are two customers.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billing_ledger.models.customer import Customer
from billing_ledger.schemas.customer import CustomerCreate

logger = logging.getLogger(__name__)


def normalize_customer_name(name: str) -> str:
    """Key used to match customer names within a tenant."""
    return " ".join(name.split()).casefold()


class CustomerService:

    def __init__(self, db: Session):
        self.db = db

    def create_customer(self, tenant_id: int, request: CustomerCreate) -> Customer:
        """Create a new customer with a zero balance."""
        name = " ".join(request.name.split())
        if not name:
            raise ValueError("Customer name is empty")

        if self.find_by_name(tenant_id, name):
            raise ValueError(f"Customer '{name}' already exists")

        customer = Customer(
            tenant_id=tenant_id,
            name=name,
            normalized_name=normalize_customer_name(name),
            phone=request.phone,
            email=request.email,
        )
        self.db.add(customer)
        self.db.flush()
        logger.info(
            "Created customer %s for tenant %s", customer.id, tenant_id
        )
        return customer

    def find_by_name(self, tenant_id: int, name: str) -> Customer | None:
        return self.db.execute(
            select(Customer).where(
                Customer.tenant_id == tenant_id,
                Customer.normalized_name == normalize_customer_name(name),
            )
        ).scalar_one_or_none()

    def resolve_customer(self, tenant_id: int, name: str) -> tuple[Customer, bool]:
        """
        Return (customer, created) for a name, creating it if needed.

        If another session creates the same customer between our
        lookup and our insert, the unique constraint on
        (tenant_id, normalized_name) rejects our insert and we
        return the winner instead.
        """
        existing = self.find_by_name(tenant_id, name)
        if existing:
            return existing, False

        try:
            with self.db.begin_nested():
                customer = self.create_customer(
                    tenant_id, CustomerCreate(name=name)
                )
        except IntegrityError:
            winner = self.find_by_name(tenant_id, name)
            if winner is None:
                raise
            return winner, False
        return customer, True

    def get_customer(self, tenant_id: int, customer_id: int) -> Customer:
        """Get a customer by ID within a tenant."""
        customer = self.db.get(Customer, customer_id)
        if not customer or customer.tenant_id != tenant_id:
            raise ValueError(f"Customer {customer_id} not found")
        return customer

    def list_customers(self, tenant_id: int) -> list[Customer]:
        customers = self.db.execute(
            select(Customer)
            .where(Customer.tenant_id == tenant_id)
            .order_by(Customer.name)
        ).scalars().all()
        return list(customers)
