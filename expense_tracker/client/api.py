# expense_tracker/client/api.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.core.config import settings
from expense_tracker.core.errors import (
    InternalError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from expense_tracker.db.models.transaction import TransactionCategory
from expense_tracker.schemas.transaction import (
    NO_TRANSACTIONS_MESSAGE,
    Transaction,
    TransactionCreate,
    TransactionCreatedResponse,
    TransactionListResponse,
)

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {429, 502, 503, 504}


def _response_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP error! status: {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP error! status: {response.status_code}"


def raise_for_status(response: httpx.Response) -> None:
    """Translate a non-2xx response into the error taxonomy."""
    code = response.status_code
    if code < 400:
        return
    message = _response_message(response)
    if code in (400, 422):
        raise ValidationError(message)
    if code == 404:
        raise NotFoundError(message)
    if code in TRANSIENT_STATUS_CODES:
        raise TransientError(message)
    raise InternalError(message)


class TransactionsClient:
    """
    Thin async wrapper over the transactions HTTP API.
    Every failure surfaces as an ExpenseTrackerError subclass.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "TransactionsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, url)
            raise TransientError(f"Request to {url} timed out") from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransientError(f"Network error: {e}") from e
        raise_for_status(response)
        return response

    async def list_transactions(self, user_id: str) -> TransactionListResponse:
        """Listing plus summary in one round trip. A user without transactions gets an empty listing."""
        try:
            response = await self._request("GET", f"/transactions/{user_id}")
        except NotFoundError as e:
            # Any other 404 (a wrong base URL, say) is a real error
            if e.message != NO_TRANSACTIONS_MESSAGE:
                raise
            return TransactionListResponse(
                transactions=[],
                total_earned=Decimal("0"),
                total_spend=Decimal("0"),
                total_balance=Decimal("0"),
                message=NO_TRANSACTIONS_MESSAGE,
            )
        try:
            return TransactionListResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise InternalError("Malformed transactions response") from e

    async def create_transaction(
        self,
        user_id: str,
        *,
        title: str,
        amount: Union[Decimal, int, float, str],
        category: Union[TransactionCategory, str],
        date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        fields = dict(user_id=user_id, title=title, amount=amount, category=category, description=description)
        if date is not None:
            fields["date"] = date
        try:
            payload = TransactionCreate(**fields)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid transaction: {e.error_count()} validation error(s)") from e

        response = await self._request(
            "POST",
            "/transactions",
            json=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        try:
            return TransactionCreatedResponse.model_validate(response.json()).transaction
        except (ValueError, PydanticValidationError) as e:
            raise InternalError("Malformed create response") from e

    async def delete_transaction(self, transaction_id: str, user_id: str) -> None:
        await self._request("DELETE", f"/transactions/{transaction_id}/{user_id}")
