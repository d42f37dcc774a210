"""Unit tests for the gateway data rules: statuses, signatures, basket and split payouts."""

import base64
from types import SimpleNamespace

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from dressla.core.models.domain.enums import OrderStatus
from dressla.marketplace.payments import (
    SellerShare,
    build_basket,
    calculate_split_payments,
    extract_redirect_url,
    map_gateway_status,
    summarize_split,
    verify_callback_signature,
)


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def public_pem(private_key) -> str:
    return (
        private_key.public_key()
        .public_bytes(serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo)
        .decode()
    )


def _sign(private_key, body: bytes) -> str:
    return base64.b64encode(private_key.sign(body, padding.PKCS1v15(), hashes.SHA256())).decode()


class TestMapGatewayStatus:
    @pytest.mark.parametrize(
        "key,expected",
        [
            ("completed", OrderStatus.PAID),
            ("partial_completed", OrderStatus.PAID),
            ("rejected", OrderStatus.CANCELED),
            ("blocked", OrderStatus.CANCELED),
            ("refunded", OrderStatus.REFUNDED),
            ("refunded_partially", OrderStatus.REFUNDED),
            ("COMPLETED", OrderStatus.PAID),
            ("processing", OrderStatus.PENDING),
            ("created", OrderStatus.PENDING),
            ("something-new", OrderStatus.PENDING),
            (None, OrderStatus.PENDING),
        ],
    )
    def test_mapping(self, key, expected):
        assert map_gateway_status(key) == expected


class TestVerifyCallbackSignature:
    def test_valid_signature(self, private_key, public_pem):
        body = b'{"event":"order_payment"}'

        assert verify_callback_signature(_sign(private_key, body), body, public_pem)

    def test_tampered_body(self, private_key, public_pem):
        signature = _sign(private_key, b'{"event":"order_payment"}')

        assert not verify_callback_signature(signature, b'{"event":"order_payment "}', public_pem)

    def test_malformed_signature(self, public_pem):
        assert not verify_callback_signature("not base64!!", b"{}", public_pem)

    def test_malformed_key(self, private_key):
        assert not verify_callback_signature(_sign(private_key, b"{}"), b"{}", "-----BEGIN PUBLIC KEY-----")


class TestBuildBasket:
    def test_lines(self):
        items = [SimpleNamespace(quantity=2, price=50.0, product_id=7)]

        assert build_basket(items) == [{"quantity": 2, "unit_price": 50.0, "product_id": "7"}]

    @pytest.mark.parametrize(
        "item,message",
        [
            (SimpleNamespace(quantity=0, price=50.0, product_id=7), "Invalid quantity"),
            (SimpleNamespace(quantity=1, price=0, product_id=7), "Invalid price"),
            (SimpleNamespace(quantity=1, price=10.0, product_id=None), "Missing product ID"),
        ],
    )
    def test_invalid_items(self, item, message):
        with pytest.raises(ValueError, match=message):
            build_basket([item])


class TestCalculateSplitPayments:
    def test_net_of_commission(self):
        shares = [SellerShare("a", "GE01", 60.0), SellerShare("b", "GE02", 40.0)]

        split = calculate_split_payments(shares, 100.0, 10)

        assert [entry["percent"] for entry in split] == [54.0, 36.0]
        assert [entry["amount"] for entry in split] == [54.0, 36.0]
        assert split[0]["iban"] == "GE01"

    def test_rounding_remainder_goes_to_largest_share(self):
        shares = [SellerShare(name, f"GE{name}", 10.0) for name in ("a", "b", "c")]

        split = calculate_split_payments(shares, 30.0, 0)

        assert [entry["percent"] for entry in split] == [33.34, 33.33, 33.33]
        assert sum(entry["percent"] for entry in split) == pytest.approx(100.0)

    def test_sellers_without_iban_are_skipped(self):
        shares = [SellerShare("a", None, 50.0), SellerShare("b", "GE02", 50.0)]

        split = calculate_split_payments(shares, 100.0, 0)

        assert len(split) == 1
        assert split[0]["percent"] == 50.0

    def test_nobody_payable(self):
        assert calculate_split_payments([SellerShare("a", None, 10.0)], 10.0, 5) == []

    @pytest.mark.parametrize("total,commission", [(0, 5), (-1, 5), (100, 100), (100, -1)])
    def test_invalid_arguments(self, total, commission):
        with pytest.raises(ValueError):
            calculate_split_payments([SellerShare("a", "GE01", 10.0)], total, commission)


class TestSummarizeSplit:
    def test_counts_rejections(self):
        summary = summarize_split(
            {
                "split_status": "partially_rejected",
                "currency": "GEL",
                "split_payments": [
                    {"status": "completed", "percent": 45},
                    {"status": "rejected", "percent": 45},
                ],
            }
        )

        assert summary["payments"] == 2
        assert summary["rejected"] == 1
        assert summary["total_percent"] == 90

    def test_missing_split(self):
        assert summarize_split(None) is None


class TestExtractRedirectUrl:
    def test_redirect_link(self):
        response = {"links": {"redirect": {"href": "https://pay.example/redirect"}}}

        assert extract_redirect_url(response, "https://site") == "https://pay.example/redirect"

    def test_approve_link_in_hal_links(self):
        response = {"_links": {"approve": {"href": "https://pay.example/approve"}}}

        assert extract_redirect_url(response, "https://site") == "https://pay.example/approve"

    def test_falls_back_to_order_id(self):
        assert extract_redirect_url({"id": "abc"}, "https://site") == "https://site?order_id=abc"

    def test_nothing_usable(self):
        with pytest.raises(ValueError):
            extract_redirect_url({}, "https://site")
