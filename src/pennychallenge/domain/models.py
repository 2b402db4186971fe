from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Credential(BaseModel):
    access_token: str
    refresh_token: str

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="after")
    def _validate_tokens(self) -> Credential:
        if not self.access_token or not self.refresh_token:
            raise ValueError("access_token and refresh_token must be non-empty")
        return self


class AccountType(StrEnum):
    UNKNOWN = "Unknown"
    PREPAID = "Prepaid"
    RETAIL = "Retail"

    @classmethod
    def from_api(cls, raw: str | None) -> AccountType:
        match raw:
            case "uk_prepaid":
                return cls.PREPAID
            case "uk_retail":
                return cls.RETAIL
            case _:
                return cls.UNKNOWN


class Account(BaseModel):
    id: str
    description: str = ""
    # Raw API value, e.g. "uk_retail".
    type: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def account_type(self) -> AccountType:
        return AccountType.from_api(self.type)


class Pot(BaseModel):
    id: str
    name: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Balance(BaseModel):
    """Balance in minor currency units."""

    amount: int = Field(alias="balance", strict=True)

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class DepositRequest(BaseModel):
    source_account_id: str = Field(min_length=1)
    pot_id: str = Field(min_length=1)
    amount: int = Field(gt=0, strict=True)
    dedupe_id: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    def form(self) -> dict[str, str]:
        return {
            "source_account_id": self.source_account_id,
            "amount": str(self.amount),
            "dedupe_id": self.dedupe_id,
        }


__all__ = ["Account", "AccountType", "Balance", "Credential", "DepositRequest", "Pot"]
