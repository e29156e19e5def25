import pickle
import threading
from typing import Any, Iterator, Optional, Sequence, Tuple

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import (
    ChannelVersions,
    Checkpoint,
    CheckpointMetadata,
    CheckpointTuple,
)
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.constants import START

from .crypto import FieldCipher


def _aad(config: RunnableConfig, section: str) -> bytes:
    thread_id = config["configurable"]["thread_id"]
    checkpoint_ns = config["configurable"].get("checkpoint_ns", "")
    return f"{thread_id}|{checkpoint_ns}|{section}".encode("utf-8")


class EncryptedInMemorySaver(InMemorySaver):
    """In-memory checkpointer that seals selected channels before storing them.

    Channels listed in ``config["configurable"]["encrypt_keys"]`` are pickled
    and AES-GCM encrypted, both as checkpoint values and as pending writes.
    The graph input channel is always sealed because it carries the raw
    invoke payload. Only the latest checkpoint of each thread is kept.
    """

    def __init__(self, cipher: FieldCipher, **kwargs: Any):
        super().__init__(**kwargs)
        self.cipher = cipher
        self._lock = threading.RLock()

    def _sealed_keys(self, config: RunnableConfig) -> set:
        return set(config["configurable"].get("encrypt_keys", [])) | {START}

    def _seal(self, value: Any, aad: bytes) -> dict:
        raw = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        return {"__enc__": self.cipher.encrypt_bytes(raw, aad), "__fmt__": "pickle"}

    def _open(self, value: Any, aad: bytes) -> Any:
        if isinstance(value, dict) and "__enc__" in value:
            return pickle.loads(self.cipher.decrypt_bytes(value["__enc__"], aad))
        return value

    def put(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        aad = _aad(config, "channel_values")
        sealed = self._sealed_keys(config)

        cp = dict(checkpoint)
        new_cv = {}
        for k, v in cp.get("channel_values", {}).items():
            if self.cipher.should_encrypt(k, sealed):
                new_cv[k] = self._seal(v, aad + b"|" + k.encode())
            else:
                new_cv[k] = v
        cp["channel_values"] = new_cv

        with self._lock:
            next_config = super().put(config, cp, metadata, new_versions)
            self._prune(next_config, checkpoint["channel_versions"])
        return next_config

    def put_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        aad = _aad(config, "writes")
        sealed = self._sealed_keys(config)

        new_writes = []
        for channel, value in writes:
            if self.cipher.should_encrypt(channel, sealed):
                value = self._seal(value, aad + b"|" + channel.encode())
            new_writes.append((channel, value))

        thread_id = config["configurable"]["thread_id"]
        checkpoint_ns = config["configurable"].get("checkpoint_ns", "")
        with self._lock:
            latest = max(self.storage[thread_id][checkpoint_ns], default="")
            # writes for a checkpoint that was already superseded and pruned
            if config["configurable"]["checkpoint_id"] < latest:
                return
            super().put_writes(config, new_writes, task_id, task_path)

    def _prune(self, config: RunnableConfig, versions: ChannelVersions) -> None:
        """Drop every checkpoint, write and blob of the thread except the latest."""
        thread_id = config["configurable"]["thread_id"]
        checkpoint_ns = config["configurable"]["checkpoint_ns"]
        checkpoint_id = config["configurable"]["checkpoint_id"]

        checkpoints = self.storage[thread_id][checkpoint_ns]
        for old_id in [cid for cid in checkpoints if cid != checkpoint_id]:
            del checkpoints[old_id]

        for key in list(self.writes.keys()):
            if key[:2] == (thread_id, checkpoint_ns) and key[2] != checkpoint_id:
                del self.writes[key]

        for key in list(self.blobs.keys()):
            if key[:2] == (thread_id, checkpoint_ns) and versions.get(key[2]) != key[3]:
                del self.blobs[key]

    def _decrypt_checkpoint(self, config: RunnableConfig, cp: dict) -> dict:
        aad = _aad(config, "channel_values")

        cv = cp.get("channel_values", {})
        if not isinstance(cv, dict):
            return cp

        new_cp = dict(cp)
        new_cp["channel_values"] = {
            k: self._open(v, aad + b"|" + k.encode()) for k, v in cv.items()
        }
        return new_cp

    def _decrypt_tuple(self, t: CheckpointTuple) -> CheckpointTuple:
        aad = _aad(t.config, "writes")
        pending = [
            (task_id, channel, self._open(value, aad + b"|" + channel.encode()))
            for task_id, channel, value in (t.pending_writes or [])
        ]
        return t._replace(
            checkpoint=self._decrypt_checkpoint(t.config, t.checkpoint),
            pending_writes=pending,
        )

    def get_tuple(self, config: RunnableConfig) -> Optional[CheckpointTuple]:
        t = super().get_tuple(config)
        if t is None:
            return None
        return self._decrypt_tuple(t)

    def list(self, config: Optional[RunnableConfig], *args: Any, **kwargs: Any) -> Iterator[CheckpointTuple]:
        for t in super().list(config, *args, **kwargs):
            yield self._decrypt_tuple(t)
