"""Declarative column rule tables used by the stages.

Each table maps a column name to the kind of rule applied to it, so new
columns can be covered by passing a different table to a stage instead of
editing stage code.
"""

from enum import Enum


class CleaningRule(str, Enum):
    """Per-column cleaning rule kinds."""

    DATE = "date"
    NUMERIC = "numeric"
    COUNTRY = "country"


class ValidationRule(str, Enum):
    """Per-column validation rule kinds."""

    ORDER_DATE = "order_date"
    DELIVERY_DATE = "delivery_date"
    SALARY_CAP = "salary_cap"
    AGE_RANGE = "age_range"
    STATUS = "status"
    AMOUNT = "amount"
    REGION = "region"
    MANAGER = "manager"
    CUSTOMER_ID = "customer_id"


HEADER_SYNONYMS: dict[str, str] = {
    "Item": "Product_Name",
    "Product": "Product_Name",
    "Sales_Date": "Transaction_Date",
    "Date": "Transaction_Date",
    "Quantity": "Units_Count",
    "Units_Sold": "Units_Count",
    "Total_Revenue": "Revenue_Amount",
    "Revenue": "Revenue_Amount",
}

CLEANING_RULES: dict[str, CleaningRule] = {
    "Sales_Date": CleaningRule.DATE,
    "Date": CleaningRule.DATE,
    "Transaction_Date": CleaningRule.DATE,
    "Price": CleaningRule.NUMERIC,
    "Total_Revenue": CleaningRule.NUMERIC,
    "Revenue_Amount": CleaningRule.NUMERIC,
    "Amount": CleaningRule.NUMERIC,
    "Quantity": CleaningRule.NUMERIC,
    "Units_Sold": CleaningRule.NUMERIC,
    "Units_Count": CleaningRule.NUMERIC,
    "Country": CleaningRule.COUNTRY,
}

# Lowercased spelling -> canonical country code
COUNTRY_ALIASES: dict[str, str] = {
    "usa": "US",
    "united states": "US",
}

VALIDATION_RULES: dict[str, ValidationRule] = {
    "Order_Date": ValidationRule.ORDER_DATE,
    "Delivery_Date": ValidationRule.DELIVERY_DATE,
    "Salary": ValidationRule.SALARY_CAP,
    "Age": ValidationRule.AGE_RANGE,
    "Status": ValidationRule.STATUS,
    "Amount": ValidationRule.AMOUNT,
    "Region": ValidationRule.REGION,
    "Manager": ValidationRule.MANAGER,
    "Customer_ID": ValidationRule.CUSTOMER_ID,
}

VALID_REGIONS: frozenset[str] = frozenset({"North", "South", "East", "West", "Central"})
SALARY_CAP = 1_000_000
AGE_MIN = 18
AGE_MAX = 100
CANCELLED_STATUS = "cancelled"
ID_COLUMN = "ID"
