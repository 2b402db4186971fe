from __future__ import annotations

import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from pennychallenge.domain.models import Account, Balance, DepositRequest, Pot
from pennychallenge.errors import DecodeError, NetworkError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _AccountList(BaseModel):
    accounts: list[Account]


class _PotList(BaseModel):
    pots: list[Pot]


class MonzoClient:
    """Minimal Monzo API client covering the endpoints the penny challenge needs.

    Holds only the access token; every call is independent and errors surface
    immediately (no retries).
    """

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = "https://api.monzo.com",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not access_token:
            msg = "access_token must be provided"
            raise ValueError(msg)

        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def list_accounts(self) -> list[Account]:
        payload = self._request_json("GET", "/accounts")
        return self._parse(_AccountList, payload, "/accounts").accounts

    def list_pots(self) -> list[Pot]:
        payload = self._request_json("GET", "/pots")
        return self._parse(_PotList, payload, "/pots").pots

    def get_balance(self, account: Account) -> Balance:
        payload = self._request_json("GET", "/balance", params={"account_id": account.id})
        return self._parse(Balance, payload, "/balance")

    def deposit(self, pot: Pot, source_account: Account, amount: int, dedupe_id: str) -> None:
        request = DepositRequest(
            source_account_id=source_account.id,
            pot_id=pot.id,
            amount=amount,
            dedupe_id=dedupe_id,
        )
        logger.info("Depositing %d into pot %s (dedupe_id=%s)", request.amount, request.pot_id, request.dedupe_id)
        self._request("PUT", f"/pots/{request.pot_id}/deposit", data=request.form())

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except requests.RequestException as exc:
            raise NetworkError(f"{path} request failed") from exc

        if response.status_code != requests.codes.ok:
            raise NetworkError(f"{path} returned {response.status_code} status code", status_code=response.status_code)

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    def _request_json(self, method: str, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._request(method, path, params=params)
        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise DecodeError(f"{path} returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise DecodeError(f"{path} returned unexpected payload type", payload=payload_raw)

        payload: dict[str, Any] = payload_raw
        return payload

    @staticmethod
    def _parse(model: type[ModelT], payload: dict[str, Any], path: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"{path} returned unexpected payload", payload=payload) from exc


__all__ = ["MonzoClient"]
