"""
Tests for the AnomalyDetector.
"""

import threading

from clawsentry.core.analysis.anomaly import AnomalyDetector


class TestAnomalyDetector:

    def test_new_tool_flagged_once(self):
        detector = AnomalyDetector()
        assert detector.observe("exec", {"cmd": "ls"}) == ["anomaly_new_tool"]
        assert detector.observe("exec", {"cmd": "ls"}) == []
        assert detector.seen_tools == frozenset({"exec"})

    def test_no_tool_no_new_tool_signal(self):
        assert AnomalyDetector().observe(None, {"a": 1}) == []

    def test_large_payload(self):
        detector = AnomalyDetector(large_payload_bytes=1000)
        assert detector.observe(None, {"blob": "a" * 2000}) == ["anomaly_large_payload"]
        assert detector.observe(None, {"blob": "a" * 10}) == []

    def test_both_signals(self):
        detector = AnomalyDetector(large_payload_bytes=1000)
        assert detector.observe("upload", "b" * 5000) == ["anomaly_new_tool", "anomaly_large_payload"]

    def test_threshold_floor(self):
        assert AnomalyDetector(large_payload_bytes=10).large_payload_bytes == 1000

    def test_disabled(self):
        detector = AnomalyDetector(enabled=False, large_payload_bytes=1000)
        assert detector.observe("exec", "x" * 5000) == []
        assert detector.seen_tools == frozenset()

    def test_concurrent_first_use_reported_once(self):
        detector = AnomalyDetector()
        barrier = threading.Barrier(16)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            found = detector.observe("shared", None)
            with lock:
                results.append(found)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r == ["anomaly_new_tool"]) == 1
