"""
Subscription Status

Billing state of a user as reported by the payment integration.
The payment side owns these values; this service only stores, filters
and displays them. A NULL status means the user never subscribed.
"""
import enum


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCEL_AT_PERIOD_END = "cancel_at_period_end"
    DELETED = "deleted"
