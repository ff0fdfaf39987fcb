"""SQLAlchemy models for the customer/invoice/item/product schema.

Table and column names are lower-case and unquoted, so the mixed-case SQL
in the DAO (``SELECT FirstName FROM Customer``) resolves to them.
"""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Customer(Base):
    """A customer. Read-only from the DAO's point of view."""

    __tablename__ = "customer"

    id = Column("id", Integer, primary_key=True, autoincrement=False)
    first_name = Column("firstname", String(50))
    last_name = Column("lastname", String(50))
    street = Column("street", String(100))
    city = Column("city", String(50))

    invoices = relationship("Invoice", back_populates="customer")


class Product(Base):
    """A product and its current price."""

    __tablename__ = "product"

    id = Column("id", Integer, primary_key=True, autoincrement=False)
    name = Column("name", String(100))
    price = Column("price", Numeric(10, 2), nullable=False)


class Invoice(Base):
    """Invoice header - ID is generated by the store."""

    __tablename__ = "invoice"

    id = Column("id", Integer, primary_key=True, autoincrement=True)
    customer_id = Column("customerid", Integer, ForeignKey("customer.id"), nullable=False)
    total = Column("total", Numeric(12, 2), nullable=False, default=0, server_default="0")

    customer = relationship("Customer", back_populates="invoices")
    items = relationship("Item", back_populates="invoice", order_by="Item.item")


class Item(Base):
    """Invoice line item. Cost is the product price captured at time of sale."""

    __tablename__ = "item"

    invoice_id = Column("invoiceid", Integer, ForeignKey("invoice.id"), primary_key=True)
    item = Column("item", Integer, primary_key=True, autoincrement=False)
    product_id = Column("productid", Integer, ForeignKey("product.id"), nullable=False)
    quantity = Column("quantity", Integer, nullable=False)
    cost = Column("cost", Numeric(10, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")

    @property
    def amount(self):
        """Line amount (quantity * cost)."""
        return self.quantity * self.cost
