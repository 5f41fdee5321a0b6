import threading
import unittest

from mpe_channels.concurrency_manager import ConcurrencyManager

KEY = ("0xsender", "0xrecipient", b"\x01" * 32)
OTHER_KEY = ("0xsender", "0xrecipient", b"\x02" * 32)


class TestConcurrencyManager(unittest.TestCase):

    def setUp(self):
        self.concurrency_manager = ConcurrencyManager()

    def _acquire_in_thread(self, key):
        acquired = threading.Event()

        def acquire():
            with self.concurrency_manager.lock(key):
                acquired.set()

        thread = threading.Thread(target=acquire)
        thread.start()
        return thread, acquired

    def test_same_key_is_serialized(self):
        with self.concurrency_manager.lock(KEY):
            thread, acquired = self._acquire_in_thread(KEY)
            self.assertFalse(acquired.wait(0.2))
        self.assertTrue(acquired.wait(5))
        thread.join()

    def test_different_keys_do_not_block(self):
        with self.concurrency_manager.lock(KEY):
            thread, acquired = self._acquire_in_thread(OTHER_KEY)
            self.assertTrue(acquired.wait(5))
        thread.join()

    def test_lock_is_released_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.concurrency_manager.lock(KEY):
                raise RuntimeError("selection failed")
        thread, acquired = self._acquire_in_thread(KEY)
        self.assertTrue(acquired.wait(5))
        thread.join()

    def test_keys(self):
        with self.concurrency_manager.lock(KEY):
            with self.concurrency_manager.lock(OTHER_KEY):
                self.assertEqual(sorted(self.concurrency_manager.keys), sorted([KEY, OTHER_KEY]))
            self.assertEqual(self.concurrency_manager.keys, [KEY])
        self.assertEqual(self.concurrency_manager.keys, [])

    def test_idle_keys_are_dropped(self):
        for i in range(100):
            with self.concurrency_manager.lock(("0xsender", "0xrecipient", bytes([i]) * 32)):
                pass
        self.assertEqual(self.concurrency_manager.keys, [])

        with self.assertRaises(RuntimeError):
            with self.concurrency_manager.lock(KEY):
                raise RuntimeError("selection failed")
        self.assertEqual(self.concurrency_manager.keys, [])

    def test_key_is_kept_while_a_thread_waits(self):
        with self.concurrency_manager.lock(KEY):
            thread, acquired = self._acquire_in_thread(KEY)
            self.assertFalse(acquired.wait(0.2))
            self.assertEqual(self.concurrency_manager.keys, [KEY])
            second, second_acquired = self._acquire_in_thread(KEY)
            self.assertFalse(second_acquired.wait(0.2))
        self.assertTrue(acquired.wait(5))
        self.assertTrue(second_acquired.wait(5))
        thread.join()
        second.join()
        self.assertEqual(self.concurrency_manager.keys, [])


if __name__ == '__main__':
    unittest.main()
