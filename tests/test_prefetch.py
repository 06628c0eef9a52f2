"""Tests for the single-slot prefetch cache and its generation tagging."""

from __future__ import annotations

import unittest

from fakes import FakeLibrary
from prefetch import PrefetchCache


class PrefetchCacheTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.library = FakeLibrary({"/r": ["a.jpg", "b.jpg"], "/r/next": ["c.jpg"]})
        self.generation = 1
        self.cache = PrefetchCache(
            list_images=self.library.list_images,
            read_image=self.library.read_image,
            current_generation=lambda: self.generation,
        )

    async def test_fetch_with_known_listing_skips_list_call(self) -> None:
        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        await self.cache.wait()

        self.assertIsNotNone(self.cache.slot)
        self.assertEqual(self.cache.slot.payload.data, b"/r/b.jpg")
        self.assertIsNone(self.cache.slot.images)
        self.assertEqual(self.library.list_calls, [])

    async def test_fetch_into_other_folder_keeps_listing(self) -> None:
        self.cache.schedule("/r/next", 0, self.generation)
        await self.cache.wait()

        self.assertEqual(self.cache.slot.images, ["/r/next/c.jpg"])

    async def test_take_matches_exactly_and_always_clears(self) -> None:
        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        await self.cache.wait()

        self.assertIsNone(self.cache.take("/r", 0, self.generation))
        self.assertIsNone(self.cache.slot)

        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        await self.cache.wait()
        slot = self.cache.take("/r", 1, self.generation)

        self.assertIsNotNone(slot)
        self.assertIsNone(self.cache.slot)

    async def test_stale_result_is_dropped(self) -> None:
        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        self.generation += 1
        await self.cache.wait()

        self.assertIsNone(self.cache.slot)

    async def test_failures_leave_slot_empty(self) -> None:
        self.library.failing_reads.add("/r/b.jpg")
        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        await self.cache.wait()
        self.assertIsNone(self.cache.slot)

        self.library.failing_lists.add("/r/next")
        self.cache.schedule("/r/next", 0, self.generation)
        await self.cache.wait()
        self.assertIsNone(self.cache.slot)

    async def test_empty_target_folder_stores_nothing(self) -> None:
        self.library.folders["/r/empty"] = []
        self.cache.schedule("/r/empty", 0, self.generation)
        await self.cache.wait()
        self.assertIsNone(self.cache.slot)

    async def test_invalidate_cancels_in_flight_fetch(self) -> None:
        self.cache.schedule("/r", 1, self.generation, images=["/r/a.jpg", "/r/b.jpg"])
        self.assertTrue(self.cache.pending)

        self.cache.invalidate()
        await self.cache.wait()

        self.assertFalse(self.cache.pending)
        self.assertIsNone(self.cache.slot)


if __name__ == "__main__":
    unittest.main()
