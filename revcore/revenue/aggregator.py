"""
MRR / ARR aggregation over the Contract -> RevenueStream graph.

Every stream amount is a per-period figure; it is normalized to a monthly
figure by the number of months its frequency covers:

    monthly   -> amount
    quarterly -> amount / 3
    annual    -> amount / 12
    one_time  -> 0 (counted as one-time revenue instead)

Each normalized amount is rounded to cents, so derived MRR survives a
JSON save and reload unchanged.

Only *active* contracts contribute. A terminated (or expired) contract is
excluded immediately, whatever its end date says.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from revcore.config import EngineConfig
from revcore.data.models import Contract, RecordModel, RevenueStream
from revcore.data.money import Money, ZERO, round_money, to_decimal
from revcore.errors import InconsistentState, InvalidInput


class MRRAggregate(RecordModel):
    """Derived revenue totals for one customer."""
    customer_id: str
    mrr: Money = ZERO
    one_time_revenue: Money = ZERO
    active_contracts: int = 0
    stream_count: int = 0

    @property
    def arr(self) -> Decimal:
        return self.mrr * 12


class PortfolioAggregate(RecordModel):
    """Derived revenue totals across every customer."""
    total_mrr: Money = Field(default=ZERO, alias="totalMRR")
    total_arr: Money = Field(default=ZERO, alias="totalARR")
    total_one_time_revenue: Money = ZERO
    customers: List[MRRAggregate] = Field(default_factory=list)


def normalize_to_monthly(
    amount: Decimal,
    frequency: str,
    config: Optional[EngineConfig] = None
) -> Decimal:
    """
    Convert a per-period amount to its monthly equivalent.

    Raises:
        InvalidInput: if the frequency is not in the configured table
    """
    config = config or EngineConfig()
    if frequency not in config.frequency_months:
        raise InvalidInput(f"Unknown revenue stream frequency: {frequency}")
    months = config.frequency_months[frequency]
    if months == 0:
        return ZERO
    return round_money(to_decimal(amount) / months)


def _is_recurring(stream: RevenueStream, config: EngineConfig) -> bool:
    return stream.type in config.recurring_stream_types


def _is_one_time(stream: RevenueStream, config: EngineConfig) -> bool:
    return stream.type in config.one_time_stream_types or config.frequency_months.get(stream.frequency) == 0


def _streams_by_contract(
    contracts: List[Contract],
    revenue_streams: List[RevenueStream]
) -> Dict[str, List[RevenueStream]]:
    """Index streams by contract id, rejecting streams that point nowhere."""
    known = {c.id for c in contracts}
    grouped: Dict[str, List[RevenueStream]] = {}
    for stream in revenue_streams:
        if stream.contract_id not in known:
            raise InconsistentState(
                f"Revenue stream {stream.id} references unknown contract {stream.contract_id}"
            )
        grouped.setdefault(stream.contract_id, []).append(stream)
    return grouped


def _aggregate(
    customer_id: str,
    contracts: List[Contract],
    grouped: Dict[str, List[RevenueStream]],
    config: EngineConfig
) -> MRRAggregate:
    mrr = ZERO
    one_time = ZERO
    active_contracts = 0
    stream_count = 0

    for contract in contracts:
        if contract.customer_id != customer_id or contract.status != "active":
            continue
        active_contracts += 1

        for stream in grouped.get(contract.id, []):
            stream_count += 1
            if _is_one_time(stream, config):
                one_time += to_decimal(stream.amount)
            elif _is_recurring(stream, config):
                mrr += normalize_to_monthly(stream.amount, stream.frequency, config)

    return MRRAggregate(
        customer_id=customer_id,
        mrr=mrr,
        one_time_revenue=one_time,
        active_contracts=active_contracts,
        stream_count=stream_count,
    )


def aggregate_mrr(
    customer_id: str,
    contracts: List[Contract],
    revenue_streams: List[RevenueStream],
    config: Optional[EngineConfig] = None
) -> MRRAggregate:
    """
    Derive a customer's MRR and one-time revenue from its active contracts.

    Args:
        customer_id: Client id to aggregate for
        contracts: Contracts (may include other customers' contracts)
        revenue_streams: Streams; each must reference a contract in `contracts`
        config: Stream type / frequency tables

    Returns:
        MRRAggregate with monthly-normalized MRR and one-time revenue

    Raises:
        InconsistentState: a stream references a contract that is not supplied
        InvalidInput: a recurring stream has an unknown frequency
    """
    config = config or EngineConfig()
    grouped = _streams_by_contract(contracts, revenue_streams)
    return _aggregate(customer_id, contracts, grouped, config)


def aggregate_portfolio(
    contracts: List[Contract],
    revenue_streams: List[RevenueStream],
    config: Optional[EngineConfig] = None
) -> PortfolioAggregate:
    """Aggregate every customer that owns at least one contract."""
    config = config or EngineConfig()
    grouped = _streams_by_contract(contracts, revenue_streams)

    customer_ids = sorted({c.customer_id for c in contracts})
    customers = [_aggregate(cid, contracts, grouped, config) for cid in customer_ids]

    total_mrr = sum((c.mrr for c in customers), ZERO)
    total_one_time = sum((c.one_time_revenue for c in customers), ZERO)

    return PortfolioAggregate(
        total_mrr=total_mrr,
        total_arr=total_mrr * 12,
        total_one_time_revenue=total_one_time,
        customers=customers,
    )
