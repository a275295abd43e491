"""Stripe payment export rows.

Maps the columns of a Stripe payments CSV export onto a typed ``PaymentRow``
and builds the short excerpt that goes into error reports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from donortrack.domain.errors import ValidationError
from donortrack.utils.amount_parser import parse_amount_minor_units
from donortrack.utils.date_parser import parse_datetime

SUCCEEDED = "succeeded"

# Stripe export column names
AMOUNT = "Amount"
DESCRIPTION = "Description"
PLAN_NICKNAME = "Cust Subscription Data Plan Nickname"
BILLING_NAME = "Billing Details Name"
CUSTOMER_EMAIL = "Cust Email"
BILLING_EMAIL = "Billing Details Email"
CUSTOMER_ID = "Cust ID"
CUSTOMER_PHONE = "Cust Phone"
TRANSACTION_ID = "Transaction ID"
CREATED = "Created Formatted"
STATUS = "Status"
SUBSCRIPTION_ID = "Cust Subscription Data ID"
CAMPAIGN_CODE = "Campaign Code"
ADDRESS_LINE1 = "Billing Details Address Line 1"
ADDRESS_LINE2 = "Billing Details Address Line 2"
ADDRESS_CITY = "Billing Details Address City"
ADDRESS_STATE = "Billing Detail Address State"
ADDRESS_POSTAL_CODE = "Billing Details Address Postal Code"
ADDRESS_COUNTRY = "Billing Details Address Country"


@dataclass(frozen=True)
class DonorAttributes:
    """Payer identity and contact details carried by a payment row."""

    name: Optional[str] = None
    email: Optional[str] = None
    processor_customer_id: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    def contact_fields(self) -> dict[str, str]:
        """Return the mutable contact fields that carry a non-blank value."""
        fields = {
            "phone": self.phone,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }
        return {key: value for key, value in fields.items() if value}


@dataclass(frozen=True)
class PaymentRow:
    """One payment as the import pipeline sees it. Amount is in minor units."""

    amount: int
    description: Optional[str] = None
    donor: DonorAttributes = field(default_factory=DonorAttributes)
    transaction_id: Optional[str] = None
    transaction_date: Optional[datetime] = None
    status: str = SUCCEEDED
    subscription_id: Optional[str] = None
    campaign_code: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return (self.status or "").strip().lower() == SUCCEEDED

    def excerpt(self) -> dict[str, Any]:
        """Fields useful when diagnosing a failed row."""
        return {
            "amount": self.amount,
            "name": self.donor.name,
            "email": self.donor.email,
            "description": self.description,
            "date": self.transaction_date.isoformat() if self.transaction_date else None,
            "status": self.status,
            "transaction_id": self.transaction_id,
        }


def _value(raw: Mapping[str, Any], column: str) -> Optional[str]:
    value = raw.get(column)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def sanitize_row(raw: Mapping[str, Any]) -> dict[str, Optional[str]]:
    """Return only the handful of raw export fields useful for diagnosis."""
    return {
        "amount": _value(raw, AMOUNT),
        "name": _value(raw, BILLING_NAME),
        "email": _value(raw, CUSTOMER_EMAIL) or _value(raw, BILLING_EMAIL),
        "description": _value(raw, PLAN_NICKNAME) or _value(raw, DESCRIPTION),
        "date": _value(raw, CREATED),
        "status": _value(raw, STATUS),
        "transaction_id": _value(raw, TRANSACTION_ID),
    }


def parse_stripe_row(raw: Mapping[str, Any]) -> PaymentRow:
    """Build a PaymentRow from a Stripe export row.

    The plan nickname takes precedence over the description, and the billing
    email fills in when the customer email column is empty.

    Args:
        raw: Row as produced by ``csv.DictReader``

    Returns:
        PaymentRow

    Raises:
        ValidationError: If the amount is missing or amount/date cannot be parsed
    """
    amount_str = _value(raw, AMOUNT)
    if amount_str is None:
        raise ValidationError("Missing amount")
    try:
        amount = parse_amount_minor_units(amount_str)
    except ValueError as e:
        raise ValidationError(str(e))

    transaction_date = None
    date_str = _value(raw, CREATED)
    if date_str is not None:
        try:
            transaction_date = parse_datetime(date_str)
        except ValueError as e:
            raise ValidationError(str(e))

    donor = DonorAttributes(
        name=_value(raw, BILLING_NAME),
        email=_value(raw, CUSTOMER_EMAIL) or _value(raw, BILLING_EMAIL),
        processor_customer_id=_value(raw, CUSTOMER_ID),
        phone=_value(raw, CUSTOMER_PHONE),
        address_line1=_value(raw, ADDRESS_LINE1),
        address_line2=_value(raw, ADDRESS_LINE2),
        city=_value(raw, ADDRESS_CITY),
        state=_value(raw, ADDRESS_STATE),
        zip_code=_value(raw, ADDRESS_POSTAL_CODE),
        country=_value(raw, ADDRESS_COUNTRY),
    )

    return PaymentRow(
        amount=amount,
        description=_value(raw, PLAN_NICKNAME) or _value(raw, DESCRIPTION),
        donor=donor,
        transaction_id=_value(raw, TRANSACTION_ID),
        transaction_date=transaction_date,
        status=(_value(raw, STATUS) or "").lower(),
        subscription_id=_value(raw, SUBSCRIPTION_ID),
        campaign_code=_value(raw, CAMPAIGN_CODE),
    )
