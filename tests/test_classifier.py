from __future__ import annotations

import asyncio

from golive.core.errors import StoreError
from golive.models import LiveNotification
from golive.services import Classification, NotificationClassifier
from golive.storage import MemoryKeyValueStore, SessionStartTracker

NEW = Classification.NEW_LIVE_SESSION
NOT_NEW = Classification.NOT_NEW


class FlakyStore(MemoryKeyValueStore):
    """Memory store whose reads can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StoreError("read timeout")
        return await super().get(key)


def _notification(user_id: str, started_at: str, title: str = "stream") -> LiveNotification:
    return LiveNotification(
        id="1",
        user_id=user_id,
        user_name=f"user{user_id}",
        type="live",
        title=title,
        started_at=started_at,
    )


def _classifier(store: MemoryKeyValueStore | None = None) -> NotificationClassifier:
    return NotificationClassifier(SessionStartTracker(store if store is not None else MemoryKeyValueStore()))


def test_first_notification_for_channel_is_new() -> None:
    async def scenario() -> list[Classification]:
        classifier = _classifier()
        return [
            await classifier.classify(_notification("1", "2024-01-01T10:00:00Z")),
            await classifier.classify(_notification("2", "2024-01-01T10:00:00Z")),
        ]

    assert asyncio.run(scenario()) == [NEW, NEW]


def test_repeats_with_same_start_are_not_new() -> None:
    async def scenario() -> list[Classification]:
        classifier = _classifier()
        results = []
        for title in ["first", "title edit", "game change", "first"]:
            results.append(
                await classifier.classify(_notification("42", "2024-01-01T10:00:00Z", title))
            )
        return results

    assert asyncio.run(scenario()) == [NEW, NOT_NEW, NOT_NEW, NOT_NEW]


def test_changed_start_is_new_after_any_number_of_repeats() -> None:
    async def scenario() -> list[Classification]:
        classifier = _classifier()
        starts = ["2024-01-01T10:00:00Z"] * 5 + ["2024-01-01T12:00:00Z", "2024-01-01T12:00:00Z"]
        return [await classifier.classify(_notification("42", s)) for s in starts]

    assert asyncio.run(scenario()) == [NEW] + [NOT_NEW] * 4 + [NEW, NOT_NEW]


def test_same_instant_in_other_offset_is_not_new() -> None:
    async def scenario() -> list[Classification]:
        classifier = _classifier()
        return [
            await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")),
            await classifier.classify(_notification("42", "2024-01-01T11:00:00+01:00")),
        ]

    assert asyncio.run(scenario()) == [NEW, NOT_NEW]


def test_record_always_holds_latest_observation() -> None:
    async def scenario() -> None:
        store = MemoryKeyValueStore()
        classifier = _classifier(store)
        await classifier.classify(_notification("42", "2024-01-01T10:00:00Z"))
        await classifier.classify(_notification("42", "2024-01-01T11:00:00+01:00"))
        assert await store.get("42") == "2024-01-01T11:00:00+01:00"

    asyncio.run(scenario())


def test_corrupt_record_fails_open_and_is_replaced() -> None:
    async def scenario() -> None:
        store = MemoryKeyValueStore()
        await store.set("42", "corrupt")
        classifier = _classifier(store)

        assert await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")) is NEW
        assert await store.get("42") == "2024-01-01T10:00:00Z"
        assert await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")) is NOT_NEW

    asyncio.run(scenario())


def test_store_read_failure_fails_open() -> None:
    async def scenario() -> None:
        store = FlakyStore()
        classifier = _classifier(store)
        await classifier.classify(_notification("42", "2024-01-01T10:00:00Z"))

        store.fail_reads = True
        assert await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")) is NEW

        store.fail_reads = False
        assert await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")) is NOT_NEW

    asyncio.run(scenario())


def test_malformed_observed_start_fails_open_without_overwriting() -> None:
    async def scenario() -> None:
        store = MemoryKeyValueStore()
        classifier = _classifier(store)
        await classifier.classify(_notification("42", "2024-01-01T10:00:00Z"))

        assert await classifier.classify(_notification("42", "")) is NEW
        assert await store.get("42") == "2024-01-01T10:00:00Z"

    asyncio.run(scenario())


def test_concurrent_duplicates_for_one_user_alert_once() -> None:
    async def scenario() -> list[Classification]:
        classifier = _classifier()
        notification = _notification("42", "2024-01-01T10:00:00Z")
        return list(await asyncio.gather(*(classifier.classify(notification) for _ in range(5))))

    results = asyncio.run(scenario())
    assert results.count(NEW) == 1
    assert results.count(NOT_NEW) == 4


def test_locks_are_released_after_classification() -> None:
    async def scenario() -> NotificationClassifier:
        classifier = _classifier()
        for user_id in ("1", "2", "3"):
            await classifier.classify(_notification(user_id, "2024-01-01T10:00:00Z"))
        notification = _notification("42", "2024-01-01T10:00:00Z")
        await asyncio.gather(*(classifier.classify(notification) for _ in range(5)))
        return classifier

    assert asyncio.run(scenario()).active_locks == 0


def test_lock_released_after_store_failure() -> None:
    async def scenario() -> NotificationClassifier:
        store = FlakyStore()
        store.fail_reads = True
        classifier = _classifier(store)
        assert await classifier.classify(_notification("42", "2024-01-01T10:00:00Z")) is NEW
        return classifier

    assert asyncio.run(scenario()).active_locks == 0
