"""Detect contact details on an inquiry that disagree with the customer record."""

from typing import Any, Mapping, Optional

from inquiry_resolution.models.customer import Customer, FieldChangeSet

# Inquiry field -> customer field
CONTACT_FIELD_MAP = {
    "contact_email": "email",
    "contact_phone": "phone",
    "contact_person": "contact_person",
}


def _clean(value: Optional[Any]) -> str:
    return "" if value is None else str(value).strip()


def detect_customer_changes(
    incoming: Mapping[str, Optional[Any]], customer: Customer
) -> FieldChangeSet:
    """
    Compare contact fields after trimming.

    A field counts as changed only when the inquiry supplies a non-empty
    value that differs from the stored one; blanks never erase data.
    """
    change_set = FieldChangeSet(customer=customer)
    for inquiry_field, customer_field in CONTACT_FIELD_MAP.items():
        new_value = _clean(incoming.get(inquiry_field))
        if not new_value:
            continue
        old_value = _clean(getattr(customer, customer_field))
        if new_value != old_value:
            change_set.changed_fields.append(customer_field)
            change_set.old_values[customer_field] = getattr(customer, customer_field)
            change_set.new_values[customer_field] = new_value
    return change_set
