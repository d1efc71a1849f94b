"""Receivable API routes."""
from typing import List

from fastapi import APIRouter

from revcore.config import get_engine_config
from revcore.data.models import ReceivableEntry
from revcore.receivables.scheduler import generate_receivables, regenerate_receivables
from revcore.receivables.schemas import (
    GenerateRequest,
    RegenerateRequest,
    RegenerateResponse,
    SummaryRequest,
    SummaryResponse,
)
from revcore.receivables.summary import filter_by_status, group_by_client, monthly_summary, receivable_totals

router = APIRouter()


@router.post("/generate", response_model=List[ReceivableEntry])
async def generate_schedule(request: GenerateRequest):
    """
    Generate the forward receivable schedule for a client.

    Returns:
        Pending entries ordered by month (empty for inactive or zero-revenue clients)
    """
    return generate_receivables(
        request.client,
        anchor_month=request.anchor_month,
        months_ahead=request.months_ahead,
        config=get_engine_config(),
    )


@router.post("/regenerate", response_model=RegenerateResponse)
async def regenerate_schedule(request: RegenerateRequest):
    """
    Plan a schedule rebuild: which entries to keep, delete and create.

    Paid and invoiced entries are always kept.
    """
    plan = regenerate_receivables(
        request.client,
        request.existing,
        previous=request.previous,
        anchor_month=request.anchor_month,
        months_ahead=request.months_ahead,
        config=get_engine_config(),
        force=request.force,
    )
    return RegenerateResponse(**plan.model_dump(), receivables=plan.receivables)


@router.post("/summary", response_model=SummaryResponse)
async def summarize_receivables(request: SummaryRequest):
    """Totals by status, per month and per client, after an optional status filter."""
    entries = filter_by_status(request.receivables, request.status)
    return SummaryResponse(
        totals=receivable_totals(entries),
        by_month=monthly_summary(entries),
        by_client={
            client_id: receivable_totals(client_entries)
            for client_id, client_entries in group_by_client(entries).items()
        },
        receivables=entries,
    )
