from pydantic import BaseModel, ConfigDict, computed_field


class CacheStatus(BaseModel):
    """Snapshot of a cache strategy's connection state"""
    backend: str
    connected: bool
    retry_count: int
    max_retries: int
    exhausted: bool = False  # retry budget used up, waiting for reconnect()

    model_config = ConfigDict(frozen=True)


class RecordStoreStatus(BaseModel):
    """Snapshot of a record store's connection state"""
    backend: str
    connected: bool

    model_config = ConfigDict(frozen=True)


class HealthReport(BaseModel):
    """Combined status of both collaborators.

    `healthy` follows the record store only: a cache outage slows requests
    down but never fails them.
    """
    cache: CacheStatus
    store: RecordStoreStatus

    @computed_field
    @property
    def healthy(self) -> bool:
        return self.store.connected

    model_config = ConfigDict(frozen=True)
