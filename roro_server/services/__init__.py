"""Storage backends that need third-party clients (imported only when selected)."""

from .firestore_store import FirestoreExperimentStore

__all__ = ["FirestoreExperimentStore"]
