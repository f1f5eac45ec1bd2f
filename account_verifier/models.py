from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .rules import ACCOUNT_NUMBER_DIGITS, BVN_DIGITS


class AccountDetails(BaseModel):
    beneficiaryName: str = ""
    bankName: str = ""
    accountNumber: str = ""
    bvn: str = ""


class AccountForm(AccountDetails):
    """Single-record submission, validated like the verification form."""

    beneficiaryName: str = Field(..., examples=["Ada Obi"])
    bankName: str = Field(..., examples=["Zenith Bank"])
    accountNumber: str = Field(..., examples=["0123456789"])
    bvn: str = Field(..., examples=["22345678901"])

    @field_validator("beneficiaryName", "bankName")
    @classmethod
    def _required(cls, value: str, info) -> str:
        if not value.strip():
            label = "Beneficiary name" if info.field_name == "beneficiaryName" else "Bank name"
            raise ValueError(f"{label} is required.")
        return value

    @field_validator("accountNumber")
    @classmethod
    def _nuban(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Account number is required.")
        if len(value) != ACCOUNT_NUMBER_DIGITS or not (value.isascii() and value.isdigit()):
            raise ValueError(f"Account number must be {ACCOUNT_NUMBER_DIGITS} digits.")
        return value

    @field_validator("bvn")
    @classmethod
    def _bvn(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("BVN is required.")
        if len(value) != BVN_DIGITS or not (value.isascii() and value.isdigit()):
            raise ValueError(f"BVN must be {BVN_DIGITS} digits.")
        return value

    def to_details(self) -> AccountDetails:
        return AccountDetails(**self.model_dump())


class VerificationResult(BaseModel):
    success: bool
    message: str
    data: Optional[AccountDetails] = None


class BankData(BaseModel):
    name: str
    sortCode: str


class BankList(BaseModel):
    """Structured output requested from the model when listing banks."""

    banks: List[BankData] = Field(
        default_factory=list,
        description="Top commercial banks in Nigeria with their official sort codes.",
    )


class BankNetworkStatus(str, Enum):
    OPERATIONAL = "Operational"
    DEGRADED = "Degraded Performance"
    OFFLINE = "Offline"


class BankStatus(BaseModel):
    name: str
    status: BankNetworkStatus


class BulkSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0


class BulkVerifyResponse(BaseModel):
    results: List[VerificationResult] = Field(default_factory=list)
    summary: BulkSummary


class ExportRequest(BaseModel):
    results: List[VerificationResult] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
