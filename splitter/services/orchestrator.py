"""JSON-in/JSON-out entry point used by the HTTP front door."""
import logging

from pydantic import ValidationError

from splitter.errors import AmountError, DecodeError, MissingRateError, RateError
from splitter.schemas import DEFAULT_BASE_CURRENCY, CalculateRequest, CalculateResponse
from splitter.services.currency import CurrencyNormalizer
from splitter.services.settlement_calculator import compute_settlements

logger = logging.getLogger(__name__)

DECODE_ERROR_MESSAGE = "failed to parse request"
FALLBACK_PAYLOAD = '{"error":"internal"}'


def decode_request(request_json) -> CalculateRequest:
    try:
        return CalculateRequest.model_validate_json(request_json)
    except ValidationError as e:
        raise DecodeError(DECODE_ERROR_MESSAGE) from e


def resolve_base_currency(code) -> str:
    return (code or "").strip().upper() or DEFAULT_BASE_CURRENCY.strip().upper()


def rates_unavailable_message(base: str) -> str:
    return f"exchange rates for {base} are unavailable"


def calculate(request: CalculateRequest, normalizer: CurrencyNormalizer) -> CalculateResponse:
    """Normalize bills into the base currency and settle them; errors become response fields."""
    base = resolve_base_currency(request.base_currency)
    try:
        bills, rate_date = normalizer.normalize(base, request.bills)
    except MissingRateError as e:
        logger.info("calculation in %s aborted: %s", base, e)
        return CalculateResponse(error=str(e), base_currency=base, rate_date=e.rate_date or None)
    except AmountError as e:
        logger.info("calculation in %s aborted: %s", base, e)
        return CalculateResponse(error=str(e), base_currency=base)
    except RateError as e:
        logger.warning("no %s rates available: %s", base, e)
        return CalculateResponse(error=rates_unavailable_message(base), base_currency=base)

    return CalculateResponse(
        settlements=compute_settlements(request.people, bills),
        bills=bills,
        base_currency=base,
        rate_date=rate_date or None,
    )


def encode_response(response: CalculateResponse) -> str:
    try:
        return response.model_dump_json(by_alias=True, exclude_none=True)
    except ValueError:
        logger.exception("failed to encode calculate response")
        return FALLBACK_PAYLOAD


def process_calculate(request_json, normalizer: CurrencyNormalizer) -> str:
    """Never raises: every failure is reported in the returned JSON."""
    try:
        request = decode_request(request_json)
    except DecodeError as e:
        logger.info("rejected calculate request: %s", e.__cause__)
        return encode_response(CalculateResponse(error=str(e)))
    try:
        response = calculate(request, normalizer)
    except Exception:
        logger.exception("calculate request failed")
        return FALLBACK_PAYLOAD
    return encode_response(response)
