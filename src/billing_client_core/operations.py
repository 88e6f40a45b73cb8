"""Operation table for the billing API.

Each resource operation is a `(verb, path template, body type, accepted
options)` entry; `BillingClient` turns any entry into a call. Identifier
parameters (`account_id`, `coupon_id`, ...) take either a raw ID or an
alternate key prefixed with `code-`, `uuid-` or `number-`.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from billing_client_core.options import STANDARD_LIST_OPTIONS
from billing_client_core.request import HttpMethod


class UnknownOperationError(AttributeError):
    """Raised for an operation name that is not in the table."""


class MissingBodyFieldError(ValueError):
    """Raised when a request body lacks fields its request type requires."""

    def __init__(self, operation: str, body_type: str, missing: list[str]):
        super().__init__(f"{operation}: {body_type} is missing required field(s): {', '.join(missing)}")
        self.operation = operation
        self.body_type = body_type
        self.missing = missing


@dataclass(frozen=True)
class Operation:
    """One remote operation.

    Attributes:
        name: Method name, e.g. "get_account"
        method: HTTP method
        path: Path template
        paginated: List operation (returns a Pager)
        body_type: Request type name for operations that take a body
        required_fields: Body fields that must be present
        options: Names of the query options the operation accepts
    """

    name: str
    method: HttpMethod
    path: str
    paginated: bool = False
    body_type: str | None = None
    required_fields: tuple[str, ...] = ()
    options: frozenset[str] = field(default_factory=frozenset)

    def check_body(self, body: Any) -> None:
        """Raise if the body is missing or lacks required fields."""
        if self.body_type is None:
            return
        if body is None:
            raise MissingBodyFieldError(self.name, self.body_type, ["<body>"])
        if isinstance(body, Mapping):
            missing = [name for name in self.required_fields if body.get(name) is None]
            if missing:
                raise MissingBodyFieldError(self.name, self.body_type, missing)


STANDARD = STANDARD_LIST_OPTIONS
NO_IDS = STANDARD - {"ids"}
IDS = frozenset(["ids"])

SITE = "/sites/{site_id}"
ACCOUNT = SITE + "/accounts/{account_id}"
INVOICE = SITE + "/invoices/{invoice_id}"
PLAN = SITE + "/plans/{plan_id}"
SUBSCRIPTION = SITE + "/subscriptions/{subscription_id}"


def _list(name: str, path: str, options: frozenset[str] = STANDARD, *extra: str) -> Operation:
    return Operation(name, HttpMethod.GET, path, paginated=True, options=options | frozenset(extra))


def _get(name: str, path: str) -> Operation:
    return Operation(name, HttpMethod.GET, path)


def _post(name: str, path: str, body_type: str | None = None, *required: str) -> Operation:
    return Operation(name, HttpMethod.POST, path, body_type=body_type, required_fields=required)


def _put(name: str, path: str, body_type: str | None = None, *required: str) -> Operation:
    return Operation(name, HttpMethod.PUT, path, body_type=body_type, required_fields=required)


def _delete(name: str, path: str, *options: str) -> Operation:
    return Operation(name, HttpMethod.DELETE, path, options=frozenset(options))


_TABLE = [
    _list("list_sites", "/sites", frozenset(["ids", "limit", "order", "sort"])),
    _get("get_site", SITE),
    # Accounts
    _list("list_accounts", SITE + "/accounts", STANDARD, "subscriber", "past_due"),
    _post("create_account", SITE + "/accounts", "AccountCreate", "code"),
    _get("get_account", ACCOUNT),
    _put("update_account", ACCOUNT, "AccountUpdate"),
    _delete("deactivate_account", ACCOUNT),
    _get("get_account_acquisition", ACCOUNT + "/acquisition"),
    _put("update_account_acquisition", ACCOUNT + "/acquisition", "AccountAcquisitionUpdatable"),
    _delete("remove_account_acquisition", ACCOUNT + "/acquisition"),
    _put("reactivate_account", ACCOUNT + "/reactivate"),
    _get("get_account_balance", ACCOUNT + "/balance"),
    _get("get_billing_info", ACCOUNT + "/billing_info"),
    _put("update_billing_info", ACCOUNT + "/billing_info", "BillingInfoCreate"),
    _delete("remove_billing_info", ACCOUNT + "/billing_info"),
    _list("list_account_coupon_redemptions", ACCOUNT + "/coupon_redemptions", IDS),
    _get("get_active_coupon_redemption", ACCOUNT + "/coupon_redemptions/active"),
    _post("create_coupon_redemption", ACCOUNT + "/coupon_redemptions/active", "CouponRedemptionCreate", "coupon_id"),
    _delete("remove_coupon_redemption", ACCOUNT + "/coupon_redemptions/active"),
    _list("list_account_credit_payments", ACCOUNT + "/credit_payments", NO_IDS),
    _list("list_account_invoices", ACCOUNT + "/invoices", STANDARD, "type"),
    _post("create_invoice", ACCOUNT + "/invoices", "InvoiceCreate", "currency"),
    _post("preview_invoice", ACCOUNT + "/invoices/preview", "InvoiceCreate", "currency"),
    _list("list_account_line_items", ACCOUNT + "/line_items", STANDARD, "original", "state", "type"),
    _post("create_line_item", ACCOUNT + "/line_items", "LineItemCreate"),
    _list("list_account_notes", ACCOUNT + "/notes", IDS),
    _get("get_account_note", ACCOUNT + "/notes/{account_note_id}"),
    _list("list_shipping_addresses", ACCOUNT + "/shipping_addresses"),
    _post("create_shipping_address", ACCOUNT + "/shipping_addresses", "ShippingAddressCreate"),
    _get("get_shipping_address", ACCOUNT + "/shipping_addresses/{shipping_address_id}"),
    _put("update_shipping_address", ACCOUNT + "/shipping_addresses/{shipping_address_id}", "ShippingAddressUpdate"),
    _delete("remove_shipping_address", ACCOUNT + "/shipping_addresses/{shipping_address_id}"),
    _list("list_account_subscriptions", ACCOUNT + "/subscriptions", STANDARD, "state"),
    _list("list_account_transactions", ACCOUNT + "/transactions", STANDARD, "type", "success"),
    _list("list_account_acquisition", SITE + "/acquisitions"),
    # Coupons
    _list("list_coupons", SITE + "/coupons"),
    _post("create_coupon", SITE + "/coupons", "CouponCreate", "code", "name"),
    _get("get_coupon", SITE + "/coupons/{coupon_id}"),
    _put("update_coupon", SITE + "/coupons/{coupon_id}", "CouponUpdate"),
    _list("list_unique_coupon_codes", SITE + "/coupons/{coupon_id}/unique_coupon_codes"),
    _get("get_unique_coupon_code", SITE + "/unique_coupon_codes/{unique_coupon_code_id}"),
    _delete("deactivate_unique_coupon_code", SITE + "/unique_coupon_codes/{unique_coupon_code_id}"),
    _put("reactivate_unique_coupon_code", SITE + "/unique_coupon_codes/{unique_coupon_code_id}/restore"),
    # Credit payments and custom fields
    _list("list_credit_payments", SITE + "/credit_payments", NO_IDS),
    _get("get_credit_payment", SITE + "/credit_payments/{credit_payment_id}"),
    _list("list_custom_field_definitions", SITE + "/custom_field_definitions"),
    _get("get_custom_field_definition", SITE + "/custom_field_definitions/{custom_field_definition_id}"),
    # Invoices
    _list("list_invoices", SITE + "/invoices", STANDARD, "type"),
    _get("get_invoice", INVOICE),
    _put("collect_invoice", INVOICE + "/collect"),
    _put("fail_invoice", INVOICE + "/mark_failed"),
    _put("mark_invoice_successful", INVOICE + "/mark_successful"),
    _put("reopen_invoice", INVOICE + "/reopen"),
    _list("list_invoice_line_items", INVOICE + "/line_items", STANDARD, "original", "state", "type"),
    _list("list_invoice_coupon_redemptions", INVOICE + "/coupon_redemptions", IDS),
    _list("list_related_invoices", INVOICE + "/related_invoices", frozenset()),
    _post("refund_invoice", INVOICE + "/refund", "InvoiceRefund", "type"),
    # Line items
    _list("list_line_items", SITE + "/line_items", STANDARD, "original", "state", "type"),
    _get("get_line_item", SITE + "/line_items/{line_item_id}"),
    _delete("remove_line_item", SITE + "/line_items/{line_item_id}"),
    # Plans and add-ons
    _list("list_plans", SITE + "/plans", STANDARD, "state"),
    _post("create_plan", SITE + "/plans", "PlanCreate", "code", "name", "currencies"),
    _get("get_plan", PLAN),
    _put("update_plan", PLAN, "PlanUpdate"),
    _delete("remove_plan", PLAN),
    _list("list_plan_add_ons", PLAN + "/add_ons", STANDARD, "state"),
    _post("create_plan_add_on", PLAN + "/add_ons", "AddOnCreate", "code", "name"),
    _get("get_plan_add_on", PLAN + "/add_ons/{add_on_id}"),
    _put("update_plan_add_on", PLAN + "/add_ons/{add_on_id}", "AddOnUpdate"),
    _delete("remove_plan_add_on", PLAN + "/add_ons/{add_on_id}"),
    _list("list_add_ons", SITE + "/add_ons", STANDARD, "state"),
    _get("get_add_on", SITE + "/add_ons/{add_on_id}"),
    # Subscriptions
    _list("list_subscriptions", SITE + "/subscriptions", STANDARD, "state"),
    _post("create_subscription", SITE + "/subscriptions", "SubscriptionCreate", "plan_code", "account", "currency"),
    _get("get_subscription", SUBSCRIPTION),
    _put("modify_subscription", SUBSCRIPTION, "SubscriptionUpdate"),
    _delete("terminate_subscription", SUBSCRIPTION, "refund"),
    _put("cancel_subscription", SUBSCRIPTION + "/cancel"),
    _put("reactivate_subscription", SUBSCRIPTION + "/reactivate"),
    _put("pause_subscription", SUBSCRIPTION + "/pause", "SubscriptionPause", "remaining_pause_cycles"),
    _put("resume_subscription", SUBSCRIPTION + "/resume"),
    _get("get_subscription_change", SUBSCRIPTION + "/change"),
    _post("create_subscription_change", SUBSCRIPTION + "/change", "SubscriptionChangeCreate", "timeframe"),
    _delete("remove_subscription_change", SUBSCRIPTION + "/change"),
    _list("list_subscription_invoices", SUBSCRIPTION + "/invoices", STANDARD, "type"),
    # Transactions
    _list("list_transactions", SITE + "/transactions", STANDARD, "type", "success"),
    _get("get_transaction", SITE + "/transactions/{transaction_id}"),
]

OPERATIONS: Mapping[str, Operation] = {operation.name: operation for operation in _TABLE}


def get_operation(name: str) -> Operation:
    try:
        return OPERATIONS[name]
    except KeyError:
        raise UnknownOperationError(f"Unknown operation: {name}") from None
