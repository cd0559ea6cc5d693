# controllers.py
"""
一覧/検索と、追加・編集モーダルの状態管理。

ネットワーク処理（fetch / execute / execute_delete）は作業スレッドから呼んでよい。
状態を変える処理（load / finish / fail など）は UI スレッドから呼ぶ。
テストや CLI からは refresh() / submit() / delete() で同期的に使える。
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from api import ApiSession, ResourceClient
from errors import TransportError, ValidationError
from models import Record
from resources import BY_KEY, ResourceSpec
from schemas import validate
from utils import safe_float

logger = logging.getLogger(__name__)


class ListController:
    def __init__(self, client, spec: ResourceSpec, reference_clients: Optional[Mapping[str, Any]] = None):
        self.client = client
        self.spec = spec
        self.reference_clients = dict(reference_clients or {})
        self.all: List[Record] = []
        self.query: str = ""
        self.refs: Dict[str, Dict[str, Record]] = {}
        self._sort: Optional[Tuple[str, bool]] = None
        self._visible: List[Record] = []

    @property
    def visible(self) -> List[Record]:
        return list(self._visible)

    @property
    def sort(self) -> Optional[Tuple[str, bool]]:
        return self._sort

    # -------------------------
    # Fetch
    # -------------------------
    def fetch(self) -> Tuple[List[Record], Dict[str, List[Record]]]:
        records = self.client.list()
        refs = {name: c.list() for name, c in self.reference_clients.items()}
        return records, refs

    def load(self, records: List[Record], refs: Optional[Mapping[str, List[Record]]] = None) -> None:
        for name, rows in (refs or {}).items():
            self.refs[name] = {r.id: r for r in rows if r.id}
        self.all = list(records)
        self._sort = None
        self._recompute()
        logger.info("%s: loaded %d records", self.spec.key, len(self.all))

    def refresh(self) -> None:
        # 失敗したら TransportError。今の一覧はそのまま残る。
        self.load(*self.fetch())

    # -------------------------
    # Search / sort
    # -------------------------
    def set_query(self, q: str) -> None:
        self.query = q or ""
        self._recompute()

    def sort_by(self, field: str, descending: bool = False) -> None:
        if field not in self.spec.sortable:
            raise ValueError(f"{self.spec.key}: column {field!r} is not sortable")
        self._sort = (field, descending)
        self._recompute()

    def clear_sort(self) -> None:
        self._sort = None
        self._recompute()

    def set_references(self, name: str, records: List[Record]) -> None:
        self.refs[name] = {r.id: r for r in records if r.id}
        self._recompute()

    def matches(self, record: Record) -> bool:
        if not self.query:
            return True
        q = self.query.casefold()
        return any(q in s.casefold() for s in self.spec.search_text(record, self.refs))

    def _recompute(self) -> None:
        rows = [r for r in self.all if self.matches(r)]
        if self._sort is not None:
            field, desc = self._sort
            rows.sort(key=lambda r: str(getattr(r, field, "") or "").casefold(), reverse=desc)
        self._visible = rows

    # -------------------------
    # Read helpers
    # -------------------------
    def get(self, record_id: str) -> Optional[Record]:
        for r in self.all:
            if r.id == record_id:
                return r
        return None

    def total(self, field: str) -> float:
        return sum(safe_float(getattr(r, field, 0)) for r in self._visible)


def connect(spec: ResourceSpec, base_url: str, timeout: float) -> ListController:
    """
    画面1つ分の ListController を作る。
    ApiSession（requests.Session）は画面ごとに1つ。
    参照コレクション（売上 -> 商品など）も同じ ApiSession で取る。
    """
    api = ApiSession(base_url, timeout)
    refs = {}
    for name in spec.references:
        ref = BY_KEY[name]
        refs[name] = ResourceClient(api, ref.endpoint, ref.record_cls)
    return ListController(ResourceClient(api, spec.endpoint, spec.record_cls), spec, reference_clients=refs)


class SessionState(enum.Enum):
    IDLE = "idle"
    CREATING = "creating"
    EDITING = "editing"


@dataclass
class PendingSubmit:
    epoch: int
    mode: SessionState
    record: Record
    target_id: Optional[str] = None


@dataclass
class SubmitOutcome:
    saved: Record
    records: Optional[List[Record]] = None
    refs: Optional[Dict[str, List[Record]]] = None
    refresh_error: Optional[TransportError] = None


class EditSession:
    def __init__(self, list_ctl: ListController):
        self.list = list_ctl
        self.client = list_ctl.client
        self.spec = list_ctl.spec
        self.state = SessionState.IDLE
        self.target: Optional[Record] = None
        self.values: Dict[str, str] = {}
        self.last_error: str = ""
        self._epoch = 0
        self._pending: Optional[PendingSubmit] = None

    @property
    def is_open(self) -> bool:
        return self.state is not SessionState.IDLE

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    # -------------------------
    # Transitions
    # -------------------------
    def _open(self, state: SessionState, target: Optional[Record], values: Dict[str, str]) -> None:
        if self.is_open:
            raise RuntimeError("the form is already open")
        self._epoch += 1
        self._pending = None
        self.state = state
        self.target = target
        self.values = values
        self.last_error = ""

    def open_create(self, defaults: Optional[Mapping[str, str]] = None) -> None:
        values = {f.name: "" for f in self.spec.form}
        values.update(defaults or {})
        self._open(SessionState.CREATING, None, values)

    def open_edit(self, record: Record) -> None:
        values = record.form_values(self.spec.secret_fields)
        self._open(SessionState.EDITING, record, {f.name: values.get(f.name, "") for f in self.spec.form})

    def set_value(self, name: str, value: str) -> None:
        self.values[name] = value

    def cancel(self) -> None:
        # 送信済みの通信は止めない。戻ってきた結果は捨てる。
        self._epoch += 1
        self._pending = None
        self.state = SessionState.IDLE
        self.target = None
        self.values = {}
        self.last_error = ""

    # -------------------------
    # Submit
    # -------------------------
    def prepare(self) -> PendingSubmit:
        if not self.is_open:
            raise RuntimeError("no form is open")
        if self._pending is not None:
            raise RuntimeError("a submission is already in progress")
        creating = self.state is SessionState.CREATING
        target_id = None if creating else self.target.id
        try:
            record = validate(self.spec.schema, self.values, creating=creating, record_id=target_id)
        except ValidationError as e:
            self.last_error = str(e)
            raise
        self.last_error = ""
        self._pending = PendingSubmit(self._epoch, self.state, record, target_id)
        return self._pending

    def execute(self, pending: PendingSubmit) -> SubmitOutcome:
        if pending.mode is SessionState.CREATING:
            saved = self.client.create(pending.record)
            logger.info("%s: created %s", self.spec.key, saved.id)
        else:
            saved = self.client.update(pending.target_id, pending.record)
            logger.info("%s: updated %s", self.spec.key, pending.target_id)
        try:
            records, refs = self.list.fetch()
        except TransportError as e:
            logger.warning("%s: refresh after save failed: %s", self.spec.key, e)
            return SubmitOutcome(saved, refresh_error=e)
        return SubmitOutcome(saved, records, refs)

    def _is_current(self, pending: PendingSubmit) -> bool:
        if pending.epoch != self._epoch or self._pending is not pending:
            logger.debug("%s: ignoring response for a closed form", self.spec.key)
            return False
        return True

    def finish(self, pending: PendingSubmit, outcome: SubmitOutcome) -> bool:
        if not self._is_current(pending):
            return False
        if outcome.records is not None:
            self.list.load(outcome.records, outcome.refs)
        self.cancel()
        return True

    def fail(self, pending: PendingSubmit, error: Exception) -> bool:
        # 入力内容は残したまま、状態も変えない
        if not self._is_current(pending):
            return False
        self._pending = None
        self.last_error = str(error)
        return True

    def submit(self) -> SubmitOutcome:
        pending = self.prepare()
        try:
            outcome = self.execute(pending)
        except TransportError as e:
            self.fail(pending, e)
            raise
        self.finish(pending, outcome)
        return outcome

    # -------------------------
    # Delete
    # -------------------------
    def execute_delete(self, record: Record) -> Tuple[List[Record], Dict[str, List[Record]]]:
        self.client.delete(record.id)
        logger.info("%s: deleted %s", self.spec.key, record.id)
        return self.list.fetch()

    def delete(self, record: Record, confirm: Callable[[Record], bool]) -> bool:
        if not confirm(record):
            return False
        self.list.load(*self.execute_delete(record))
        return True
