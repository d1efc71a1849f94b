"""Receivable request/response schemas."""
from typing import Dict, List, Optional

from pydantic import Field

from revcore.data.models import Client, MonthKey, ReceivableEntry, RecordModel
from revcore.receivables.summary import MonthlyReceivableSummary, ReceivableTotals


class GenerateRequest(RecordModel):
    client: Client
    anchor_month: Optional[MonthKey] = None
    months_ahead: Optional[int] = None


class RegenerateRequest(RecordModel):
    """
    Rebuild a client's schedule after an edit.

    `previous` is the client as it was before the edit; without it the
    schedule is only rebuilt when the client has no receivables or `force`
    is set.
    """
    client: Client
    existing: List[ReceivableEntry] = Field(default_factory=list)
    previous: Optional[Client] = None
    anchor_month: Optional[MonthKey] = None
    months_ahead: Optional[int] = None
    force: bool = False


class RegenerateResponse(RecordModel):
    client_id: str
    regenerated: bool
    keep: List[ReceivableEntry] = Field(default_factory=list)
    delete: List[ReceivableEntry] = Field(default_factory=list)
    create: List[ReceivableEntry] = Field(default_factory=list)
    receivables: List[ReceivableEntry] = Field(default_factory=list)


class SummaryRequest(RecordModel):
    receivables: List[ReceivableEntry] = Field(default_factory=list)
    status: Optional[str] = "all"


class SummaryResponse(RecordModel):
    totals: ReceivableTotals
    by_month: List[MonthlyReceivableSummary] = Field(default_factory=list)
    by_client: Dict[str, ReceivableTotals] = Field(default_factory=dict)
    receivables: List[ReceivableEntry] = Field(default_factory=list)
