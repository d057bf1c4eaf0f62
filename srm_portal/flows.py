from __future__ import annotations

from datetime import datetime, timedelta, timezone

from srm_portal.schemas.responses import FlowStep
from srm_portal.services.booking_flow import BookingFlow
from srm_portal.services.srm_api import SRMApiService


class FlowStore:
    """In-memory registry giving every booking attempt its own context."""

    def __init__(
        self,
        api: SRMApiService,
        ttl_seconds: int = 3600,
        max_flows: int = 1000,
        default_currency: str = "",
    ) -> None:
        self._api = api
        self._flows: dict[str, BookingFlow] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_flows = max_flows
        self._default_currency = default_currency

    def __len__(self) -> int:
        return len(self._flows)

    def _is_expired(self, flow: BookingFlow) -> bool:
        return datetime.now(timezone.utc) - flow.updated_at > self._ttl

    def _evict(self, reserve: int = 0) -> None:
        # Flows mid-submit are never evicted
        for flow_id in [
            fid for fid, f in self._flows.items() if self._is_expired(f) and not f.busy
        ]:
            self._flows.pop(flow_id).abandon()

        limit = self._max_flows - reserve
        if len(self._flows) <= limit:
            return
        # Completed flows go first, then the least recently touched
        candidates = sorted(
            (f for f in self._flows.values() if not f.busy),
            key=lambda f: (f.step != FlowStep.completed, f.updated_at),
        )
        while len(self._flows) > limit and candidates:
            self._flows.pop(candidates.pop(0).flow_id).abandon()

    def create_flow(self) -> BookingFlow:
        flow = BookingFlow(self._api, default_currency=self._default_currency)
        self._evict(reserve=1)
        self._flows[flow.flow_id] = flow
        return flow

    def get_flow(self, flow_id: str) -> BookingFlow | None:
        flow = self._flows.get(flow_id)
        if flow and self._is_expired(flow) and not flow.busy:
            del self._flows[flow_id]
            flow.abandon()
            return None
        return flow

    def discard(self, flow_id: str) -> bool:
        flow = self._flows.pop(flow_id, None)
        if flow is None:
            return False
        flow.abandon()
        return True
