"""Unit tests for domain model helpers and currency formatting"""

import pytest
from datetime import datetime
from pesa_shield.domain.models import Transaction, TransactionMetadata, UNKNOWN
from pesa_shield.utils.currency import (
    format_amount,
    format_amount_with_decimals,
    format_compact,
    is_high_value,
    is_very_high_value,
)

NOW = datetime(2026, 3, 10, 14, 0)


@pytest.mark.parametrize(
    "amount,expected",
    [
        (500, "TSh 500"),
        (1000, "TSh 1,000"),
        (850_000, "TSh 850,000"),
        (2_500_000, "TSh 2.5M"),
    ],
)
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_format_amount_with_decimals():
    assert format_amount_with_decimals(1500.5) == "TSh 1,500.50"
    assert format_amount_with_decimals(1500) == "TSh 1,500"
    assert format_amount_with_decimals(12.25) == "TSh 12.25"


def test_format_compact():
    assert format_compact(1500) == "1.5K"
    assert format_compact(2_500_000) == "2.5M"
    assert format_compact(999) == "999"


def test_value_bands():
    assert not is_high_value(500_000)
    assert is_high_value(500_001)
    assert is_high_value(-600_000)
    assert is_very_high_value(1_000_001)
    assert not is_very_high_value(1_000_000)


def test_metadata_accessors_default_to_unknown():
    metadata = TransactionMetadata()

    assert metadata.location_or_unknown == UNKNOWN
    assert metadata.device_id_or_unknown == UNKNOWN
    assert metadata.network_type_or_unknown == UNKNOWN


def test_transaction_helpers():
    transaction = Transaction(
        transaction_id="tx_1",
        amount=-250_000,
        platform="Airtel Money",
        type="pay_merchant",
        timestamp=NOW.replace(hour=23),
        metadata=TransactionMetadata(sender_platform="M-Pesa"),
    )

    assert transaction.absolute_amount == 250_000
    assert transaction.formatted_amount == "TSh 250,000"
    assert transaction.type_display_name == "Pay Merchant"
    assert transaction.is_cross_platform
    assert transaction.is_suspicious


def test_transaction_is_not_suspicious_by_default():
    transaction = Transaction(transaction_id="tx_2", amount=20_000, platform="M-Pesa", type="send", timestamp=NOW)

    assert not transaction.is_cross_platform
    assert not transaction.is_suspicious
