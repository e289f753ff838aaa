"""
Request and callback bodies exchanged with the gateway.

Bodies are records with fixed field order and defaults so that their
canonical JSON, and therefore their digest, is stable for a given input.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .constants import DEFAULT_CURRENCY, PAYMENT_STATUS_CODES, PAYMENT_STATUS_UNKNOWN

Number = Union[int, float]


@dataclass
class OrderInformation:
    payable_amount: Number
    currency_code: str = DEFAULT_CURRENCY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payable_amount': self.payable_amount,
            'currency_code': self.currency_code,
        }


@dataclass
class CustomFields:
    """Merchant-defined fields echoed back by the gateway."""
    mdf_1: str = ''
    mdf_2: str = ''
    mdf_3: str = ''
    mdf_4: str = ''
    mdf_5: str = ''
    mdf_6: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {
            'mdf_1': self.mdf_1,
            'mdf_2': self.mdf_2,
            'mdf_3': self.mdf_3,
            'mdf_4': self.mdf_4,
            'mdf_5': self.mdf_5,
            'mdf_6': self.mdf_6,
        }


@dataclass
class PaymentOrder:
    """
    Body of a create-payment-order call.

    The informational blocks (customer, product, shipment, promotion,
    discount) are free-form mappings owned by the merchant; they default to
    empty objects and keep the caller's key order.
    """
    order_id: str
    order_information: OrderInformation
    ipn_url: str = ''
    success_url: str = ''
    cancel_url: str = ''
    failure_url: str = ''
    promotion_information: Dict[str, Any] = field(default_factory=dict)
    discount_detail: Dict[str, Any] = field(default_factory=dict)
    custom_fields: CustomFields = field(default_factory=CustomFields)
    customer_information: Dict[str, Any] = field(default_factory=dict)
    product_information: Dict[str, Any] = field(default_factory=dict)
    shipment_information: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, order_id: str, amount: Number, currency: str = DEFAULT_CURRENCY, **kwargs) -> 'PaymentOrder':
        """Shortcut building the order information block from amount and currency."""
        custom = kwargs.pop('custom_fields', None)
        if isinstance(custom, Mapping):
            custom = CustomFields(**custom)
        return cls(
            order_id=order_id,
            order_information=OrderInformation(amount, currency or DEFAULT_CURRENCY),
            custom_fields=custom or CustomFields(),
            **kwargs
        )

    def to_dict(self) -> Dict[str, Any]:
        body = {
            'order_id': self.order_id,
            'order_information': self.order_information.to_dict(),
            'ipn_url': self.ipn_url,
            'success_url': self.success_url,
            'cancel_url': self.cancel_url,
            'failure_url': self.failure_url,
            'promotion_information': dict(self.promotion_information or {}),
            'discount_detail': dict(self.discount_detail or {}),
        }
        body.update(self.custom_fields.to_dict())
        body['customer_information'] = dict(self.customer_information or {})
        body['product_information'] = dict(self.product_information or {})
        body['shipment_information'] = dict(self.shipment_information or {})
        return body


@dataclass
class PaymentVerification:
    payment_order_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {'paymentOrderId': self.payment_order_id}


@dataclass
class PaymentInquiry:
    order_id: str
    merchant_code: str

    def to_dict(self) -> Dict[str, Any]:
        return {'order_id': self.order_id, 'merchant_code': self.merchant_code}


def parse_payment_status(status_code: Optional[Any]) -> str:
    """Map a gateway status code to APPROVED, DECLINED, CANCELLED, FAILED or UNKNOWN."""
    if status_code is None:
        return PAYMENT_STATUS_UNKNOWN
    return PAYMENT_STATUS_CODES.get(str(status_code), PAYMENT_STATUS_UNKNOWN)


@dataclass
class IPNNotification:
    """Payment-status callback posted by the gateway."""
    order_id: str
    status: str
    order_tracking_id: Optional[str] = None
    status_code: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: Optional[Number] = None
    currency: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'IPNNotification':
        """
        Build a notification from a decoded callback body.

        Raises:
            ValueError: If the body is not an object or lacks order_id/status
        """
        if not isinstance(data, Mapping):
            raise ValueError("IPN body must be a JSON object")
        if not data.get('order_id') or not data.get('status'):
            raise ValueError("IPN body requires order_id and status")

        status_code = data.get('status_code')
        return cls(
            order_id=str(data['order_id']),
            status=str(data['status']),
            order_tracking_id=data.get('order_tracking_id'),
            status_code=None if status_code is None else str(status_code),
            transaction_id=data.get('transaction_id'),
            amount=data.get('amount'),
            currency=data.get('currency'),
            raw=dict(data),
        )

    @property
    def payment_status(self) -> str:
        return parse_payment_status(self.status_code)
