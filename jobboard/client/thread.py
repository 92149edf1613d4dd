"""Client-side state for one application's message thread.

Sends are shown immediately as pending entries and reconciled with the
server's copy once confirmed. Every send carries a client token, and a
retry of a failed send reuses it, so the server stores the message once
even when the first attempt did reach it.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import settings
from .api import ApiError, JobBoardClient

logger = logging.getLogger(__name__)


@dataclass
class ThreadEntry:
    id: Union[int, str]
    content: str
    created_at: str
    sender_type: str
    sender_id: int
    sender_name: str = ""
    client_token: Optional[str] = None
    pending: bool = False
    # Confirmed by our own POST but not yet seen in a fetched thread.
    local: bool = False

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "ThreadEntry":
        sender = item["sender"]
        return cls(
            id=item["id"],
            content=item["content"],
            created_at=item["created_at"],
            sender_type=sender["type"],
            sender_id=sender["id"],
            sender_name=sender.get("name", ""),
            client_token=item.get("client_token"),
        )


class MessageThread:
    def __init__(
        self,
        client: JobBoardClient,
        application_id: int,
        sender_type: str,
        sender_id: int,
        poll_interval: Optional[float] = None,
        max_length: Optional[int] = None,
    ):
        self.client = client
        self.application_id = application_id
        self.sender_type = sender_type
        self.sender_id = sender_id
        self.poll_interval = poll_interval or settings.message_poll_interval_seconds
        self.max_length = max_length or settings.message_max_length

        self.messages: List[ThreadEntry] = []
        self.draft = ""
        self.sending = False
        self.last_error: Optional[Exception] = None

        # (content, token) of the last failed send, reused when it is retried.
        self._failed: Optional[tuple] = None
        self._lock = threading.RLock()
        # Fetches are numbered so a slow, older one never overwrites a newer one.
        self._fetch_seq = 0
        self._applied_seq = 0
        self._stop: Optional[threading.Event] = None
        self._poller: Optional[threading.Thread] = None

    def refresh(self) -> List[ThreadEntry]:
        """Replace the thread with the server's, keeping local entries it lacks yet."""
        with self._lock:
            self._fetch_seq += 1
            seq = self._fetch_seq
        data = self.client.get_thread(self.application_id)
        fetched = [ThreadEntry.from_api(item) for item in data.get("messages", [])]
        with self._lock:
            if seq < self._applied_seq:
                logger.debug("Discarding stale fetch %s for application %s", seq, self.application_id)
                return list(self.messages)
            self._applied_seq = seq
            seen_ids = {m.id for m in fetched}
            seen_tokens = {m.client_token for m in fetched if m.client_token}
            carried = [
                m for m in self.messages
                if (m.pending or m.local)
                and m.id not in seen_ids
                and not (m.client_token and m.client_token in seen_tokens)
            ]
            self.messages = fetched + carried
            return list(self.messages)

    def send(self, text: Optional[str] = None) -> Optional[ThreadEntry]:
        """
        Send ``text`` (default: the current draft). Returns the confirmed entry,
        or None when nothing was sent or the send failed. On failure the
        pending entry is removed, the text goes back into ``draft`` and the
        error is kept in ``last_error`` for a manual ``retry()``.
        """
        content = (self.draft if text is None else text).strip()
        if not content or len(content) > self.max_length:
            return None

        with self._lock:
            if self.sending:
                return None
            self.sending = True
            if self._failed and self._failed[0] == content:
                token = self._failed[1]
            else:
                token = uuid.uuid4().hex
            temp = ThreadEntry(
                id=f"temp-{uuid.uuid4().hex}",
                content=content,
                created_at="",
                sender_type=self.sender_type,
                sender_id=self.sender_id,
                client_token=token,
                pending=True,
            )
            self.messages.append(temp)
            self.draft = ""
            self.last_error = None

        try:
            data = self.client.send_message(
                self.application_id, content, self.sender_type, self.sender_id, client_token=token
            )
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Sending on application %s failed: %s", self.application_id, exc)
            with self._lock:
                self.messages = [m for m in self.messages if m.id != temp.id]
                self.draft = content
                self.last_error = exc
                # A conflicting token is never accepted, so a retry needs a fresh one.
                conflict = isinstance(exc, ApiError) and exc.status_code == 409
                self._failed = None if conflict else (content, token)
                self.sending = False
            return None

        with self._lock:
            self._failed = None
            self.sending = False
            confirmed = replace(
                temp, id=data["id"], created_at=data["created_at"], pending=False, local=True
            )
            if any(m.id == confirmed.id for m in self.messages):
                # A poll already brought in the server copy.
                self.messages = [m for m in self.messages if m.id != temp.id]
                return next(m for m in self.messages if m.id == confirmed.id)
            self.messages = [confirmed if m.id == temp.id else m for m in self.messages]
            return confirmed

    def retry(self) -> Optional[ThreadEntry]:
        return self.send(self.draft)

    def start_polling(self) -> None:
        if self._poller is not None and self._poller.is_alive():
            return
        self._stop = threading.Event()
        self._poller = threading.Thread(
            target=self._poll_loop, args=(self._stop,), name=f"thread-poll-{self.application_id}", daemon=True
        )
        self._poller.start()

    def stop_polling(self) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._poller is not None:
            self._poller.join()
        self._poller = None
        self._stop = None

    def _poll_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.poll_interval):
            try:
                self.refresh()
            except (ApiError, httpx.HTTPError) as exc:
                logger.warning("Polling application %s failed: %s", self.application_id, exc)
