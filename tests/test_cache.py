"""Tests for cache module"""

import threading
import time

from hue_exporter.cache import CachedValue, MetricCache


class TestCachedValue:
    def test_timestamp_defaults_to_now(self):
        before = time.time()
        value = CachedValue(data="test")
        assert before <= value.timestamp <= time.time()


class TestMetricCache:
    """Test MetricCache class"""

    def test_initial_value(self):
        """Reads before any write return the initial value"""
        assert MetricCache("weather").read() is None
        assert MetricCache("hue", initial=()).read() == ()

    def test_write_and_read(self):
        cache = MetricCache("weather")
        cache.write(5.5)
        assert cache.read() == 5.5

    def test_write_replaces_value(self):
        cache = MetricCache("weather", initial=0.0)
        cache.write(1.0)
        cache.write(2.0)
        assert cache.read() == 2.0

    def test_has_value_and_updated_at(self):
        cache = MetricCache("quote")
        assert not cache.has_value
        assert cache.updated_at is None

        before = time.time()
        cache.write(3512.4)
        assert cache.has_value
        assert cache.updated_at >= before

    def test_repr(self):
        assert "has_value=False" in repr(MetricCache("quote"))


class TestConcurrentAccess:
    """Readers never observe a mixture of two writes"""

    def test_readers_see_whole_values(self):
        cache = MetricCache("hue", initial=(0, 0, 0))
        stop = threading.Event()
        torn: list[tuple] = []

        def writer():
            i = 0
            while not stop.is_set():
                i += 1
                cache.write((i, i, i))

        def reader():
            while not stop.is_set():
                value = cache.read()
                if len(set(value)) != 1:
                    torn.append(value)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        time.sleep(0.2)
        stop.set()
        for thread in threads:
            thread.join()

        assert torn == []
        assert cache.read()[0] > 0
