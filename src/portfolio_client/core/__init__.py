"""Core utilities and shared functionality."""

from portfolio_client.core.timezone import (
    get_local_tz,
    now_local,
    today_local,
    to_local,
    parse_timestamp,
    format_timestamp,
)
from portfolio_client.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    FxRateUnavailableError,
    RemoteError,
    NetworkError,
    UnauthorizedError,
    ServerError,
    DecodeError,
    InvalidResponseError,
    AuthenticationError,
    PartialSubmissionError,
)
from portfolio_client.core.money import (
    round_to,
    round_amount,
    round_base,
    round_price,
    round_quantity,
    parse_decimal,
    normalize_currency,
)

__all__ = [
    "get_local_tz",
    "now_local",
    "today_local",
    "to_local",
    "parse_timestamp",
    "format_timestamp",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "FxRateUnavailableError",
    "RemoteError",
    "NetworkError",
    "UnauthorizedError",
    "ServerError",
    "DecodeError",
    "InvalidResponseError",
    "AuthenticationError",
    "PartialSubmissionError",
    "round_to",
    "round_amount",
    "round_base",
    "round_price",
    "round_quantity",
    "parse_decimal",
    "normalize_currency",
]
