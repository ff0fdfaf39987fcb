"""Data-access object for customers, invoices and their line items."""

from __future__ import annotations

import logging
from contextlib import closing, contextmanager
from decimal import Decimal
from typing import Generator, List, Optional, Sequence

import psycopg2

from invoicing.entities import CustomerEntity

logger = logging.getLogger(__name__)

SQL_TOTAL_FOR_CUSTOMER = "SELECT COALESCE(SUM(Total), 0) AS Amount FROM Invoice WHERE CustomerID = %s"
SQL_NAME_OF_CUSTOMER = "SELECT LastName FROM Customer WHERE ID = %s"
SQL_NUMBER_OF_CUSTOMERS = "SELECT COUNT(*) AS Number FROM Customer"
SQL_NUMBER_OF_INVOICES = "SELECT COUNT(*) AS Number FROM Invoice WHERE CustomerID = %s"
SQL_FIND_CUSTOMER = "SELECT ID, FirstName, Street, City FROM Customer WHERE ID = %s"
SQL_CUSTOMERS_IN_CITY = "SELECT ID, FirstName, Street, City FROM Customer WHERE City = %s"

SQL_INSERT_INVOICE = "INSERT INTO Invoice (CustomerID) VALUES (%s) RETURNING ID"
SQL_PRODUCT_PRICE = "SELECT Price FROM Product WHERE ID = %s"
SQL_INSERT_ITEM = """
    INSERT INTO Item (InvoiceID, ProductID, Quantity, Cost, Item)
    VALUES (%s, %s, %s, %s, %s)
"""
SQL_UPDATE_INVOICE_TOTAL = """
    UPDATE Invoice
    SET Total = (
        SELECT COALESCE(SUM(Quantity * Cost), 0) FROM Item WHERE InvoiceID = %s
    )
    WHERE ID = %s
"""


class DataAccessError(Exception):
    """
    Error while talking to the database.

    Connection, query and constraint failures all surface as this error,
    chained from the driver exception. When a rollback fails after the
    original error, the rollback failure is kept on ``rollback_error``.
    """

    def __init__(self, message: str, rollback_error: Optional[BaseException] = None):
        super().__init__(message)
        self.rollback_error = rollback_error


class ProductNotFound(DataAccessError):
    """Price lookup found no product with the given ID."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


def _customer_from_row(row) -> CustomerEntity:
    customer_id, first_name, street, city = row
    return CustomerEntity(
        customer_id=customer_id,
        name=first_name,
        address=street,
        city=city,
    )


class DAO:
    """
    Queries and the invoice-creation transaction over an injected data source.

    The data source only needs a ``get_connection()`` method returning a
    DB-API connection with the ``%s`` paramstyle (psycopg2). No connection
    is kept between calls.
    """

    def __init__(self, data_source):
        self._data_source = data_source

    @contextmanager
    def _cursor(self) -> Generator:
        """Cursor on a fresh connection; both are closed on exit."""
        try:
            with closing(self._data_source.get_connection()) as connection:
                with connection.cursor() as cursor:
                    yield cursor
        except psycopg2.Error as e:
            raise DataAccessError(f"Database query failed: {e}") from e

    def _fetch_scalar(self, sql: str, params: tuple = ()):
        with self._cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return row[0] if row else None

    def total_for_customer(self, customer_id: int) -> Decimal:
        """
        Sum of the invoice totals for a customer.

        Returns:
            The total, or Decimal("0") if the customer has no invoices or
            does not exist.
        """
        amount = self._fetch_scalar(SQL_TOTAL_FOR_CUSTOMER, (customer_id,))
        return Decimal(amount) if amount is not None else Decimal("0")

    def name_of_customer(self, customer_id: int) -> Optional[str]:
        """
        Last name of a customer.

        Returns:
            The LastName column, or None if no customer has this ID.
        """
        with self._cursor() as cursor:
            cursor.execute(SQL_NAME_OF_CUSTOMER, (customer_id,))
            row = cursor.fetchone()
        if row is None:
            logger.debug(f"No customer with ID {customer_id}")
            return None
        return row[0]

    def number_of_customers(self) -> int:
        """Number of rows in the Customer table."""
        return int(self._fetch_scalar(SQL_NUMBER_OF_CUSTOMERS) or 0)

    def number_of_invoices_for_customer(self, customer_id: int) -> int:
        """Number of invoices belonging to a customer."""
        return int(self._fetch_scalar(SQL_NUMBER_OF_INVOICES, (customer_id,)) or 0)

    def find_customer(self, customer_id: int) -> Optional[CustomerEntity]:
        """
        Look up a customer by primary key.

        Returns:
            The matching CustomerEntity, or None if not found.
        """
        with self._cursor() as cursor:
            cursor.execute(SQL_FIND_CUSTOMER, (customer_id,))
            row = cursor.fetchone()
        if row is None:
            logger.debug(f"No customer with ID {customer_id}")
            return None
        return _customer_from_row(row)

    def customers_in_city(self, city: str) -> List[CustomerEntity]:
        """Customers living in a city, in result-set order."""
        with self._cursor() as cursor:
            cursor.execute(SQL_CUSTOMERS_IN_CITY, (city,))
            rows = cursor.fetchall()
        return [_customer_from_row(row) for row in rows]

    def create_invoice(
        self,
        customer: CustomerEntity,
        product_ids: Sequence[int],
        quantities: Sequence[int],
    ) -> int:
        """
        Create an invoice and its line items in a single transaction.

        Each line item costs the product's current price; its position in
        ``product_ids`` becomes the Item index. Either everything is
        committed or nothing is.

        Args:
            customer: The customer being invoiced
            product_ids: Products to bill, one line item each
            quantities: Quantity for each product, same length as product_ids

        Returns:
            The generated invoice ID.

        Raises:
            ValueError: If product_ids and quantities differ in length
            ProductNotFound: If a product does not exist (transaction rolled back)
            DataAccessError: If any statement fails (transaction rolled back)
        """
        if len(product_ids) != len(quantities):
            raise ValueError(
                f"product_ids and quantities must have the same length "
                f"(got {len(product_ids)} and {len(quantities)})"
            )

        try:
            with closing(self._data_source.get_connection()) as connection:
                connection.autocommit = False
                try:
                    invoice_id = self._insert_invoice(
                        connection, customer.customer_id, product_ids, quantities
                    )
                    connection.commit()
                except Exception as error:
                    rollback_error = self._rollback(connection, customer.customer_id)
                    if isinstance(error, psycopg2.Error):
                        raise DataAccessError(
                            f"Invoice creation failed: {error}",
                            rollback_error=rollback_error,
                        ) from error
                    if isinstance(error, DataAccessError):
                        error.rollback_error = rollback_error
                    raise
        except psycopg2.Error as e:
            raise DataAccessError(f"Database connection failed: {e}") from e

        logger.info(
            f"Created invoice {invoice_id} for customer {customer.customer_id} "
            f"with {len(product_ids)} item(s)"
        )
        return invoice_id

    def _insert_invoice(
        self,
        connection,
        customer_id: int,
        product_ids: Sequence[int],
        quantities: Sequence[int],
    ) -> int:
        with connection.cursor() as cursor:
            cursor.execute(SQL_INSERT_INVOICE, (customer_id,))
            invoice_id = cursor.fetchone()[0]

            for index, (product_id, quantity) in enumerate(zip(product_ids, quantities)):
                cursor.execute(SQL_PRODUCT_PRICE, (product_id,))
                row = cursor.fetchone()
                if row is None:
                    raise ProductNotFound(product_id)

                cursor.execute(
                    SQL_INSERT_ITEM,
                    (invoice_id, product_id, quantity, row[0], index),
                )

            cursor.execute(SQL_UPDATE_INVOICE_TOTAL, (invoice_id, invoice_id))

        return invoice_id

    def _rollback(self, connection, customer_id: int) -> Optional[Exception]:
        """Roll back, returning the rollback failure instead of raising it."""
        logger.warning(f"Rolling back invoice creation for customer {customer_id}")
        try:
            connection.rollback()
        except psycopg2.Error as e:
            logger.error(f"Rollback failed for customer {customer_id}: {e}")
            return e
        return None
