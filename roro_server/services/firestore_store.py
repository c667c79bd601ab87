"""
Firestore experiment store: assignments, telemetry events and recommendation clicks.

Used when STORAGE_BACKEND=firebase.
- ab_assignments/{experiment}__{scope}__{subject_id}: one doc per sticky assignment (set = upsert)
- ab_events: append-only experiment telemetry
- recommend_clicks: append-only clicks on recommended items

Range + equality queries need composite indexes on
(experiment, created_at) for ab_events and (item_id, subject_key, created_at) for recommend_clicks.
"""

import json
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from roro_engine.errors import StorageError
from roro_engine.models.telemetry import (
    CLICK,
    EXPOSURE,
    Assignment,
    ClickRecord,
    DailyVariantClicks,
    ItemClickCount,
    TelemetryEvent,
    VariantStats,
)
from roro_engine.models.viewer import SubjectScope

ASSIGNMENTS = "ab_assignments"
EVENTS = "ab_events"
CLICKS = "recommend_clicks"


def _project_id_from_credentials_file(credentials_path: Union[Path, str]) -> Optional[str]:
    """Read project_id from a Google service account JSON file if present."""
    path = Path(credentials_path)
    if not path.is_file():
        return None
    with open(path) as f:
        data = json.load(f)
    return data.get("project_id") or data.get("projectId")


def _assignment_doc_id(experiment: str, scope: str, subject_id: str) -> str:
    # Firestore doc ids cannot contain "/"
    return f"{experiment}__{scope}__{subject_id}".replace("/", "_")


class FirestoreExperimentStore:
    """ExperimentStore backed by Firestore collections."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        if not firebase_admin._apps:
            if credentials_path:
                cred = credentials.Certificate(str(Path(credentials_path).resolve()))
                proj = project_id or _project_id_from_credentials_file(credentials_path)
                opts = {"projectId": proj} if proj else None
                firebase_admin.initialize_app(cred, opts)
            else:
                firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
        self._db = firestore.client()

    def _call(self, what: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"Firestore {what} failed: {e}") from e

    def fetch_assignment(
        self,
        experiment: str,
        scope: SubjectScope,
        subject_id: str,
    ) -> Optional[Assignment]:
        scope_value = SubjectScope(scope).value
        ref = self._db.collection(ASSIGNMENTS).document(_assignment_doc_id(experiment, scope_value, subject_id))
        doc = self._call("fetch_assignment", ref.get)
        if not doc.exists:
            return None
        return Assignment.model_validate(doc.to_dict())

    def upsert_assignment(self, assignment: Assignment) -> None:
        doc_id = _assignment_doc_id(assignment.experiment, assignment.scope.value, assignment.subject_id)
        ref = self._db.collection(ASSIGNMENTS).document(doc_id)
        data = assignment.model_dump()
        data["scope"] = assignment.scope.value
        self._call("upsert_assignment", ref.set, data)

    def insert_telemetry(self, event: TelemetryEvent) -> None:
        self._call("insert_telemetry", self._db.collection(EVENTS).add, event.model_dump(mode="python"))

    def insert_click(self, record: ClickRecord) -> None:
        self._call("insert_click", self._db.collection(CLICKS).add, record.model_dump(mode="python"))

    def query_recent_click(self, item_id: str, subject_key: str) -> Optional[datetime]:
        query = (
            self._db.collection(CLICKS)
            .where(filter=FieldFilter("item_id", "==", item_id))
            .where(filter=FieldFilter("subject_key", "==", subject_key))
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .limit(1)
        )
        docs = self._call("query_recent_click", lambda: list(query.stream()))
        if not docs:
            return None
        return docs[0].to_dict().get("created_at")

    def _ranged(self, collection: str, since: Optional[datetime], until: Optional[datetime]):
        query = self._db.collection(collection)
        if since is not None:
            query = query.where(filter=FieldFilter("created_at", ">=", since))
        if until is not None:
            query = query.where(filter=FieldFilter("created_at", "<=", until))
        return query

    def aggregate_variant_stats(
        self,
        experiment: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[VariantStats]:
        query = self._ranged(EVENTS, since, until)
        if experiment is not None:
            query = query.where(filter=FieldFilter("experiment", "==", experiment))
        counts: Dict[Tuple[str, str], Dict[str, int]] = defaultdict(lambda: {EXPOSURE: 0, CLICK: 0})
        for doc in self._call("aggregate_variant_stats", lambda: list(query.stream())):
            d = doc.to_dict()
            bucket = counts[(d.get("experiment", ""), d.get("variant", ""))]
            name = d.get("event_name")
            if name in (EXPOSURE, CLICK):
                bucket[name] += 1
        return [
            VariantStats(experiment=exp, variant=var, exposures=c[EXPOSURE], clicks=c[CLICK])
            for (exp, var), c in sorted(counts.items())
        ]

    def click_counts(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[ItemClickCount]:
        query = self._ranged(CLICKS, since, until)
        counts: Dict[str, int] = defaultdict(int)
        for doc in self._call("click_counts", lambda: list(query.stream())):
            item_id = doc.to_dict().get("item_id")
            if item_id:
                counts[item_id] += 1
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [ItemClickCount(item_id=i, clicks=n) for i, n in ranked[: max(0, limit)]]

    def daily_variant_clicks(
        self,
        experiment: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[DailyVariantClicks]:
        query = (
            self._ranged(EVENTS, since, until)
            .where(filter=FieldFilter("experiment", "==", experiment))
            .where(filter=FieldFilter("event_name", "==", CLICK))
        )
        counts: Dict[Tuple, int] = defaultdict(int)
        for doc in self._call("daily_variant_clicks", lambda: list(query.stream())):
            d = doc.to_dict()
            created = d.get("created_at")
            if created is None:
                continue
            counts[(created.date(), d.get("variant", ""))] += 1
        return [
            DailyVariantClicks(day=day, variant=var, clicks=n)
            for (day, var), n in sorted(counts.items())
        ]

    def ping(self) -> bool:
        try:
            list(self._db.collection(ASSIGNMENTS).limit(1).stream())
            return True
        except google_exceptions.GoogleAPIError:
            return False
