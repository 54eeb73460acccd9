from style_inspector.scheduling import FrameCoalescer, Throttle


class AfterHarness:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, int, object]] = []
        self.cancelled: list[object] = []

    def after(self, ms: int, cb) -> str:
        handle = f"h{len(self.scheduled) + 1}"
        self.scheduled.append((handle, ms, cb))
        return handle

    def cancel(self, handle: object) -> None:
        self.cancelled.append(handle)

    def run(self, handle: str) -> None:
        for h, _ms, cb in list(self.scheduled):
            if h == handle:
                cb()
                return
        raise AssertionError(f"Handle {handle} not found")


def test_frame_coalescer_runs_only_latest_request() -> None:
    harness = AfterHarness()
    calls: list[str] = []
    frames = FrameCoalescer(after=harness.after, after_cancel=harness.cancel)

    frames.request(lambda: calls.append("first"))
    frames.request(lambda: calls.append("second"))

    assert harness.cancelled == ["h1"]
    assert harness.scheduled[-1][1] == 16
    assert frames.pending is True
    harness.run("h2")
    assert calls == ["second"]
    assert frames.pending is False


def test_frame_coalescer_cancel_drops_pending() -> None:
    harness = AfterHarness()
    calls: list[str] = []
    frames = FrameCoalescer(after=harness.after, after_cancel=harness.cancel)
    frames.request(lambda: calls.append("x"))
    frames.cancel()
    # A stale timer firing after cancel must not run the callback.
    harness.run("h1")
    assert calls == []
    assert harness.cancelled == ["h1"]


def test_throttle_collapses_burst_into_one_trailing_run() -> None:
    harness = AfterHarness()
    calls: list[int] = []
    throttle = Throttle(after=harness.after, after_cancel=harness.cancel, interval_ms=100)

    for value in range(5):
        throttle.trigger(lambda value=value: calls.append(value))

    assert len(harness.scheduled) == 1
    assert harness.scheduled[0][1] == 100
    harness.run("h1")
    assert calls == [4]

    throttle.trigger(lambda: calls.append(99))
    assert len(harness.scheduled) == 2


def test_cancel_failures_are_contained() -> None:
    harness = AfterHarness()

    def broken_cancel(handle: object) -> None:
        raise RuntimeError("timer already gone")

    throttle = Throttle(after=harness.after, after_cancel=broken_cancel)
    throttle.trigger(lambda: None)
    throttle.cancel()
    assert throttle.pending is False
