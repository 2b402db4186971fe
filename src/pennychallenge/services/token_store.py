from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pennychallenge.domain.models import Credential
from pennychallenge.errors import DecodeError, TokenStoreError

logger = logging.getLogger(__name__)

TOKEN_FILE_MODE = 0o600


class TokenStore(Protocol):
    def load(self) -> Credential: ...

    def save(self, credential: Credential) -> None: ...


class JsonFileTokenStore(TokenStore):
    def __init__(self, *, path: Path) -> None:
        self.path = path

    def load(self) -> Credential:
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            msg = f"Could not read credentials from {self.path}; run `pennychallenge auth` first"
            raise TokenStoreError(msg) from exc

        try:
            return Credential.model_validate_json(raw)
        except ValidationError as exc:
            raise DecodeError(f"Credential file {self.path} is malformed") from exc

    def save(self, credential: Credential) -> None:
        # Serialize first so a bad credential never truncates the existing file.
        data = json.dumps(credential.model_dump())
        tmp_name: str | None = None
        try:
            directory = self.path.resolve().parent
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.fchmod(handle.fileno(), TOKEN_FILE_MODE)
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise TokenStoreError(f"Could not write credentials to {self.path}") from exc
        logger.info("Stored credentials at %s", self.path)


__all__ = ["JsonFileTokenStore", "TOKEN_FILE_MODE", "TokenStore"]
