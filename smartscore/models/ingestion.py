from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from smartscore.models.classifier import Contribution, apply_event
from smartscore.models.trade_stats import WalletProfile
from smartscore.utils.errors import InvalidField
from smartscore.utils.types import ActivityRecord, RecordOutcomeResult, parse_activity

RawRecord = Union[ActivityRecord, Mapping[str, Any]]


@dataclass(frozen=True)
class RecordOutcome:
    index: int
    tx_hash: Optional[str]
    contribution: Optional[Contribution] = None
    error: Optional[InvalidField] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_result(self) -> RecordOutcomeResult:
        return RecordOutcomeResult(
            index=self.index,
            tx_hash=self.tx_hash,
            ok=self.ok,
            error=self.error.message if self.error else None,
        )


def _tx_hash_of(raw: RawRecord) -> Optional[str]:
    if isinstance(raw, ActivityRecord):
        return raw.tx_hash
    if isinstance(raw, Mapping):
        value = raw.get("tx_hash")
        return value if isinstance(value, str) else None
    return None


def load_activities(profile: WalletProfile, records: Iterable[RawRecord]) -> WalletProfile:
    # Fatal on the first invalid record; records applied before it stay applied
    for raw in records:
        event = parse_activity(raw)
        apply_event(profile, event)
    return profile


def ingest_activities(profile: WalletProfile, records: Iterable[RawRecord]) -> List[RecordOutcome]:
    # Invalid records are skipped; every record gets an outcome
    outcomes: List[RecordOutcome] = []
    for index, raw in enumerate(records):
        tx_hash = _tx_hash_of(raw)
        try:
            event = parse_activity(raw)
        except InvalidField as e:
            print(f"[WARNING] Skipping record {index} ({tx_hash or 'no tx_hash'}) "
                  f"for wallet {profile.address}: {e.message}")
            outcomes.append(RecordOutcome(index=index, tx_hash=tx_hash, error=e))
            continue
        contribution = apply_event(profile, event)
        outcomes.append(RecordOutcome(index=index, tx_hash=tx_hash, contribution=contribution))
    return outcomes


def build_profile(
    address: str,
    time_window: int,
    records: Iterable[RawRecord],
    history_tx: Iterable[str] = (),
) -> WalletProfile:
    profile = WalletProfile(address=address, time_window=time_window)
    for signature in history_tx:
        profile.add_history_tx(signature)
    return load_activities(profile, records)
