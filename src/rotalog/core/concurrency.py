"""
Producer/consumer hand-off primitives for sinks.

This module contains:
- BackpressurePolicy: WAIT or DROP when the queue is full
- AdmissionQueue: bounded multi-producer/single-consumer FIFO
- SignalSlot: single-slot signal channel that shares the queue's lock

Design:
- One ``threading.Lock`` per queue; producers wait on ``_not_full``, the
  consumer waits on ``_ready`` for either an item, a raised signal or closure
- DROP never blocks; a full queue rejects the item and counts it
- Only the queue is shared between threads; everything the consumer touches
  after dequeue is owned by the consumer alone
"""

from __future__ import annotations

import threading
from collections import deque
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class BackpressurePolicy(str, Enum):
    WAIT = "wait"  # Block the producer until there is room
    DROP = "drop"  # Discard the item immediately when full


class SignalSlot:
    """Single-slot signal channel.

    Raising a signal never blocks; raising it again while one is pending is
    absorbed by the pending one. The slot must be bound to a queue's
    condition so the consumer can wait on both at once.
    """

    __slots__ = ("_ready", "_pending")

    def __init__(self, ready: threading.Condition) -> None:
        self._ready = ready
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def raise_signal(self) -> None:
        with self._ready:
            self._pending = True
            self._ready.notify()

    def consume(self) -> bool:
        """Take the pending signal; returns False if none was pending."""
        with self._ready:
            was_pending = self._pending
            self._pending = False
            return was_pending


class AdmissionQueue(Generic[T]):
    """Bounded, thread-safe queue feeding a single consumer.

    Usage:
        q = AdmissionQueue[LogRecord](32, policy=BackpressurePolicy.DROP)
        q.put(record)              # producer side, any thread
        q.wait_ready()             # consumer side
        ok, item = q.try_dequeue()
    """

    def __init__(
        self,
        capacity: int,
        *,
        policy: BackpressurePolicy = BackpressurePolicy.WAIT,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._capacity = capacity
        self._policy = policy
        self._items: deque[T] = deque()
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._ready = threading.Condition(self._lock)
        self._closed = False
        self._dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def policy(self) -> BackpressurePolicy:
        return self._policy

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> int:
        return self._dropped

    def new_signal(self) -> SignalSlot:
        """Create a signal slot the consumer can wait on with this queue."""
        return SignalSlot(self._ready)

    def qsize(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def is_full(self) -> bool:
        return len(self._items) >= self._capacity

    def put(self, item: T) -> bool:
        """Admit ``item`` according to the policy.

        Returns True when the item was queued, False when it was dropped
        (DROP policy, queue full). Raises RuntimeError after ``close()``.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("queue is closed")
            if len(self._items) >= self._capacity:
                if self._policy is BackpressurePolicy.DROP:
                    self._dropped += 1
                    return False
                while len(self._items) >= self._capacity and not self._closed:
                    self._not_full.wait()
                if self._closed:
                    raise RuntimeError("queue is closed")
            self._items.append(item)
            self._ready.notify()
            return True

    def try_dequeue(self) -> tuple[bool, T | None]:
        """Pop the oldest item; returns (False, None) if empty."""
        with self._lock:
            if not self._items:
                return False, None
            item = self._items.popleft()
            self._not_full.notify()
            return True, item

    def wait_ready(self, signal: SignalSlot | None = None) -> None:
        """Block until an item is queued, ``signal`` is raised, or closure."""
        with self._lock:
            while (
                not self._items
                and not self._closed
                and not (signal is not None and signal.pending)
            ):
                self._ready.wait()

    def close(self) -> None:
        """Mark end of input and wake every waiter."""
        with self._lock:
            self._closed = True
            self._ready.notify_all()
            self._not_full.notify_all()
