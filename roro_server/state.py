"""Application state: engine config, experiment store, recorder and assigner."""

import logging
from typing import Optional

from roro_engine.config import EngineConfig
from roro_engine.experiment import ExperimentAssigner
from roro_engine.metrics import MetricsRecorder
from roro_engine.storage import ExperimentStore, InMemoryExperimentStore

from .config import ServerConfig, get_config

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig, store: Optional[ExperimentStore] = None):
        self.config = config
        self.engine_config: EngineConfig = config.load_engine_config()

        # Experiment store: Firestore when configured, else in-memory
        self.store = store if store is not None else self._create_store(config)
        logger.info("[startup] Experiment store: %s", type(self.store).__name__)

        self.recorder = MetricsRecorder(self.store, self.engine_config)
        self.assigner = ExperimentAssigner(self.store, self.recorder, self.engine_config)

    def _create_store(self, config: ServerConfig) -> ExperimentStore:
        """Create experiment store (Firestore when selected and creds exist, else in-memory)."""
        if config.storage_backend == "firebase":
            ok, errors = config.validate()
            if not ok:
                raise ValueError("; ".join(errors))
            from .services import FirestoreExperimentStore

            return FirestoreExperimentStore(
                project_id=config.firebase_project_id,
                credentials_path=config.firebase_credentials_path,
            )
        return InMemoryExperimentStore()

    @property
    def store_name(self) -> str:
        return type(self.store).__name__


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState(get_config())
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (None resets it to be rebuilt on next access)."""
    global _state
    _state = state
