"""
Query context carried through log records via contextvars.

One facade call = one request id (plus the company being queried, when
known). The values propagate into tasks created inside the context, so the
concurrent source fetches and provider calls of one query are tagged alike.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_company_var: ContextVar[Optional[str]] = ContextVar("company", default=None)


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set (or generate) the request id for the current context and return it."""
    request_id = request_id or _new_request_id()
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    _request_id_var.set(None)
    _company_var.set(None)


def get_company() -> Optional[str]:
    return _company_var.get()


def bind_company(company: Optional[str]) -> None:
    """Attach the resolved company name to the active query."""
    _company_var.set(company)


class RequestContext:
    """
    Scopes a request id, and optionally a company, to a block.

    Usage:
        async with RequestContext(company="Apple"):
            await aggregator.aggregate("Apple", 10)
    """

    def __init__(self, request_id: Optional[str] = None, company: Optional[str] = None):
        self.request_id = request_id or _new_request_id()
        self.company = company
        self._tokens = []

    def __enter__(self):
        self._tokens = [
            (_request_id_var, _request_id_var.set(self.request_id)),
            (_company_var, _company_var.set(self.company)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []
        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)
