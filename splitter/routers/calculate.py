"""Calculate: settle a batch of bills posted by the client."""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from splitter.dependencies import get_normalizer
from splitter.services.currency import CurrencyNormalizer
from splitter.services.orchestrator import process_calculate

router = APIRouter(prefix="/calculate", tags=["calculate"])


@router.post("")
async def calculate(
    request: Request,
    normalizer: CurrencyNormalizer = Depends(get_normalizer),
):
    # Decode errors are reported in the payload, so the body is read raw.
    body = await request.body()
    result = await run_in_threadpool(process_calculate, body, normalizer)
    return Response(content=result, media_type="application/json")
