import threading
import unittest

from scraper.url_queue import UrlQueue


class UrlQueueTestCase(unittest.TestCase):
    def test_enqueue_preserves_order_and_reports_length(self) -> None:
        queue = UrlQueue()

        self.assertEqual(queue.enqueue(["https://a", "https://b"]), 2)
        self.assertEqual(queue.enqueue(["https://c"]), 3)
        self.assertEqual(queue.dequeue_up_to(10), ["https://a", "https://b", "https://c"])

    def test_dequeue_up_to_takes_oldest_first(self) -> None:
        queue = UrlQueue()
        queue.enqueue([f"https://site/{index}" for index in range(5)])

        self.assertEqual(queue.dequeue_up_to(2), ["https://site/0", "https://site/1"])
        self.assertEqual(len(queue), 3)
        self.assertEqual(queue.dequeue_up_to(2), ["https://site/2", "https://site/3"])
        self.assertEqual(queue.dequeue_up_to(2), ["https://site/4"])

    def test_empty_queue_and_non_positive_limits(self) -> None:
        queue = UrlQueue()
        self.assertEqual(queue.dequeue_up_to(20), [])
        self.assertFalse(queue)

        queue.enqueue(["https://a"])
        self.assertEqual(queue.dequeue_up_to(0), [])
        self.assertEqual(queue.dequeue_up_to(-3), [])
        self.assertTrue(queue)

    def test_duplicates_and_empty_batches_are_kept_as_is(self) -> None:
        queue = UrlQueue()
        queue.enqueue([])
        queue.enqueue(["https://a", "https://a", ""])

        self.assertEqual(queue.dequeue_up_to(5), ["https://a", "https://a", ""])

    def test_concurrent_enqueue_loses_no_updates(self) -> None:
        queue = UrlQueue()
        threads_count = 8
        per_thread = 50
        batch = [f"https://load.example.com/{index}" for index in range(20)]
        start = threading.Barrier(threads_count)

        def producer() -> None:
            start.wait()
            for _ in range(per_thread):
                queue.enqueue(batch)

        threads = [threading.Thread(target=producer) for _ in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(queue), threads_count * per_thread * len(batch))

    def test_concurrent_dequeue_hands_out_each_entry_once(self) -> None:
        queue = UrlQueue()
        queue.enqueue([f"https://site/{index}" for index in range(1000)])
        taken: list[list[str]] = []
        taken_lock = threading.Lock()

        def consumer() -> None:
            while True:
                batch = queue.dequeue_up_to(7)
                if not batch:
                    return
                with taken_lock:
                    taken.append(batch)

        threads = [threading.Thread(target=consumer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        flattened = [url for batch in taken for url in batch]
        self.assertEqual(len(flattened), 1000)
        self.assertEqual(len(set(flattened)), 1000)
        for batch in taken:
            indices = [int(url.rsplit("/", 1)[1]) for url in batch]
            self.assertEqual(indices, sorted(indices))


if __name__ == "__main__":
    unittest.main()
