import json
import os

from jobboard.event_bus import EventBus, TicketEvent


class AuditLogger:
    """
    Subscribes to an EventBus and appends every ticket event
    to a JSONL file, flushing in batches.
    """

    def __init__(self, file_path: str, event_bus: EventBus, batch_size: int = 50):
        self.file_path = file_path
        self.event_bus = event_bus
        self.batch_size = batch_size
        self._buffer: list[str] = []

        os.makedirs(os.path.dirname(os.path.abspath(self.file_path)), exist_ok=True)
        self.event_bus.subscribe(self.log_event)

    def log_event(self, event: TicketEvent) -> None:
        self._buffer.append(json.dumps(event.model_dump(mode="json")) + "\n")
        if len(self._buffer) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        with open(self.file_path, "a", encoding="utf-8") as f:
            f.writelines(self._buffer)
        self._buffer.clear()

    def close(self) -> None:
        self.event_bus.unsubscribe(self.log_event)
        self.flush()
