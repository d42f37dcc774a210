"""
Payment callback I/O models.

Mirrors the subset of the Bank of Georgia callback payload the server reads.
Unknown fields are accepted and ignored.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class GatewayOrderStatus(BaseModel):
    key: str
    value: Optional[str] = None


class SplitPaymentLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: Optional[float] = None
    percent: Optional[float] = None
    description: Optional[str] = None
    iban: str
    status: str
    reject_reason: Optional[str] = None


class SplitDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    split_status: str
    currency: str
    request_channel: Optional[str] = None
    split_reject_reason: Optional[str] = None
    split_payments: List[SplitPaymentLine] = []


class CallbackBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    order_id: str
    industry: Optional[str] = None
    order_status: Optional[GatewayOrderStatus] = None
    status: Optional[str] = None
    split: Optional[SplitDetails] = None


class PaymentCallback(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str
    zoned_request_time: Optional[str] = None
    body: CallbackBody


class CallbackResult(BaseModel):
    success: bool = True
    message: str
    order_id: Optional[int] = None
    status: Optional[str] = None
    details: Optional[dict[str, Any]] = None
