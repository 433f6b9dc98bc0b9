from __future__ import annotations

from typing import Optional, Protocol

from .model import MonthlyAllotment


class CreditRepository(Protocol):
    def get(self, *, user_id: int, year: int, month: int) -> Optional[MonthlyAllotment]:
        raise NotImplementedError

    def create_if_absent(self, allotment: MonthlyAllotment) -> MonthlyAllotment:
        """Insert unless a row for (user, year, month) exists; return the stored row.

        Concurrent first touches must end with exactly one row.
        """

        raise NotImplementedError

    def upsert(self, allotment: MonthlyAllotment) -> None:
        """Insert or overwrite the allotment (explicit refresh)."""

        raise NotImplementedError
