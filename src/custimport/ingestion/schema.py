"""Customers table schema and the CSV header it is loaded from."""

CUSTOMER_TABLE = "customers"

# CSV header name -> table column, in output order.
CSV_FIELD_MAP = {
    "Customer Id": "customer_id",
    "First Name": "first_name",
    "Last Name": "last_name",
    "Company": "company",
    "City": "city",
    "Country": "country",
    "Phone 1": "phone1",
    "Phone 2": "phone2",
    "Email": "email",
    "Subscription Date": "subscription_date",
    "Website": "website",
}

CSV_COLUMNS = list(CSV_FIELD_MAP)
CUSTOMER_COLUMNS = list(CSV_FIELD_MAP.values())
CUSTOMER_CONFLICT_COLUMNS = ["customer_id"]

SUBSCRIPTION_DATE_COLUMN = "Subscription Date"
SOURCE_DATE_FORMAT = "%d-%m-%Y"
STORAGE_DATE_FORMAT = "%Y-%m-%d"


def customer_table_ddl(table: str = CUSTOMER_TABLE) -> str:
    """DDL for the customers table; valid on both SQLite and PostgreSQL."""
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    customer_id       VARCHAR(64)  NOT NULL,
    first_name        VARCHAR(255) NOT NULL,
    last_name         VARCHAR(255) NOT NULL,
    company           VARCHAR(255) NOT NULL,
    city              VARCHAR(255) NOT NULL,
    country           VARCHAR(255) NOT NULL,
    phone1            VARCHAR(64)  NOT NULL,
    phone2            VARCHAR(64)  NOT NULL,
    email             VARCHAR(255) NOT NULL,
    subscription_date DATE         NOT NULL,
    website           VARCHAR(255) NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_{table}_customer_id ON {table}(customer_id);
CREATE INDEX IF NOT EXISTS idx_{table}_subscription_date ON {table}(subscription_date);
"""


def customer_unique_index_ddl(table: str = CUSTOMER_TABLE) -> str:
    """Unique index on customer_id; required for upsert mode."""
    return f"CREATE UNIQUE INDEX IF NOT EXISTS uq_{table}_customer_id ON {table}(customer_id);"
