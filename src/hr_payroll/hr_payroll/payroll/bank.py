from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.constants import DEFAULT_CURRENCY
from ..employees.model import BankDetails


@dataclass(frozen=True)
class TransferResult:
    success: bool
    provider: Optional[str] = None
    reference: Optional[str] = None
    error: Optional[str] = None
    currency: str = DEFAULT_CURRENCY


class BankTransferGateway(Protocol):
    """Outbound salary transfer.

    Implementations report business failures through ``TransferResult`` and
    raise ExternalServiceError when the provider itself cannot be reached.
    """

    provider: str

    def transfer(self, *, amount: int, beneficiary: BankDetails, currency: str = DEFAULT_CURRENCY) -> TransferResult:
        raise NotImplementedError


class MockBankGateway(BankTransferGateway):
    """Validates beneficiary fields and simulates a successful payout."""

    provider = "mock-bank"

    def transfer(self, *, amount: int, beneficiary: BankDetails, currency: str = DEFAULT_CURRENCY) -> TransferResult:
        if not (beneficiary.account_no and beneficiary.ifsc and beneficiary.account_name and beneficiary.bank_name):
            return TransferResult(
                success=False,
                provider=self.provider,
                error="Missing bank details (accountNo, ifsc, accountName, bankName)",
                currency=currency,
            )
        if amount <= 0:
            return TransferResult(success=False, provider=self.provider, error="Invalid payout amount", currency=currency)

        reference = "MOCK-" + secrets.token_hex(6).upper()
        return TransferResult(success=True, provider=self.provider, reference=reference, currency=currency)
