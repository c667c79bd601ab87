"""
Sticky experiment assignment.

Resolution order (first match wins):
1. stored assignment for the authenticated user
2. stored assignment for the session
3. client sticky token (e.g. a cookie) naming a valid variant
4. deterministic hash bucket, persisted, with one exposure event

Concurrent first-time requests for one subject may both reach step 4; they
compute the same variant, and the store upserts, so the duplicate write is
harmless. No locking is needed.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from pydantic import BaseModel

from .bucketing import bucket, build_seed
from .config import EngineConfig, resolve_config
from .errors import ExperimentConfigError, StorageError
from .metrics import MetricsRecorder
from .models.telemetry import EXPOSURE, Assignment, utcnow
from .models.viewer import SubjectIdentity, SubjectScope
from .sanitize import sanitize_key, sanitize_variants
from .storage import ExperimentStore

logger = logging.getLogger(__name__)

ASSIGN_CONTEXT = "ab_assign"


class AssignmentSource(str, Enum):
    EXISTING = "existing"
    ASSIGNED = "assigned"


class AssignmentOrigin(str, Enum):
    USER = "user"
    SESSION = "session"
    TOKEN = "token"
    HASH = "hash"


class AssignmentResult(BaseModel):
    experiment: str
    variant: str
    source: AssignmentSource
    origin: AssignmentOrigin
    is_new: bool = False


class ExperimentAssigner:
    """Resolves or creates sticky variant assignments."""

    def __init__(
        self,
        store: ExperimentStore,
        recorder: MetricsRecorder,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.recorder = recorder
        self.config = resolve_config(config)
        self.clock = clock

    def validate(self, experiment: str, variants: Union[str, Iterable[str]]) -> tuple:
        """Sanitize inputs; raise ExperimentConfigError unless there are >= 2 distinct variants."""
        exp = sanitize_key(experiment, self.config.max_key_length)
        if not exp:
            raise ExperimentConfigError("experiment key is required")
        clean = sanitize_variants(variants, self.config.max_variants, self.config.max_key_length)
        if len(clean) < 2:
            raise ExperimentConfigError("need_at_least_two_variants")
        return exp, clean

    def assign(
        self,
        subject: SubjectIdentity,
        experiment: str,
        variants: Union[str, Iterable[str]],
        split: Optional[int] = None,
        sticky_token: Optional[str] = None,
    ) -> AssignmentResult:
        exp, clean = self.validate(experiment, variants)
        split = self.config.default_split if split is None else split

        # 1) user scope
        if subject.user_id:
            stored = self.store.fetch_assignment(exp, SubjectScope.USER, subject.user_id)
            if stored and stored.variant in clean:
                return self._existing(exp, stored.variant, AssignmentOrigin.USER)

        # 2) session scope; promote to user scope after login
        if subject.session_id:
            stored = self.store.fetch_assignment(exp, SubjectScope.SESSION, subject.session_id)
            if stored and stored.variant in clean:
                if subject.user_id:
                    self._persist(exp, SubjectScope.USER, subject.user_id, stored.variant)
                return self._existing(exp, stored.variant, AssignmentOrigin.SESSION)

        # 3) sticky token
        token = sanitize_key(sticky_token, self.config.max_key_length)
        if token and token in clean:
            self._persist(exp, subject.scope, subject.scoped_id, token)
            return self._existing(exp, token, AssignmentOrigin.TOKEN)

        # 4) hash bucket
        index = bucket(build_seed(subject.subject_key, exp), len(clean), split)
        variant = clean[index]
        self._persist(exp, subject.scope, subject.scoped_id, variant)
        self.recorder.record_event(exp, variant, subject, EXPOSURE, 1.0, ASSIGN_CONTEXT)
        logger.info("[assign] experiment=%s subject=%s variant=%s", exp, subject.subject_key, variant)
        return AssignmentResult(
            experiment=exp,
            variant=variant,
            source=AssignmentSource.ASSIGNED,
            origin=AssignmentOrigin.HASH,
            is_new=True,
        )

    def _existing(self, exp: str, variant: str, origin: AssignmentOrigin) -> AssignmentResult:
        return AssignmentResult(
            experiment=exp,
            variant=variant,
            source=AssignmentSource.EXISTING,
            origin=origin,
            is_new=False,
        )

    def _persist(self, exp: str, scope: SubjectScope, subject_id: str, variant: str) -> None:
        assignment = Assignment(
            experiment=exp,
            scope=scope,
            subject_id=subject_id,
            variant=variant,
            assigned_at=self.clock(),
        )
        try:
            self.store.upsert_assignment(assignment)
        except StorageError as e:
            logger.warning(
                "[assign] persist failed experiment=%s scope=%s subject=%s: %s",
                exp, scope.value, subject_id, e,
            )
