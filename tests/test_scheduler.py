"""
Tests for the delayed action queue and effect timers.
"""

from stack_attack.core.scheduler import DelayedActionQueue, EffectTimers


class TestDelayedActionQueue:

    def test_not_run_before_deadline(self):
        queue = DelayedActionQueue()
        calls = []
        queue.schedule(500, lambda: calls.append("a"))

        assert queue.drain(499) == 0
        assert calls == []
        assert queue.drain(500) == 1
        assert calls == ["a"]
        assert len(queue) == 0

    def test_deadline_order_then_fifo(self):
        queue = DelayedActionQueue()
        calls = []
        queue.schedule(300, lambda: calls.append("late"))
        queue.schedule(100, lambda: calls.append("first"))
        queue.schedule(100, lambda: calls.append("second"))

        queue.drain(1000)

        assert calls == ["first", "second", "late"]

    def test_cancel_all(self):
        queue = DelayedActionQueue()
        calls = []
        queue.schedule(10, lambda: calls.append(1))
        queue.schedule(20, lambda: calls.append(2))

        assert queue.cancel_all() == 2
        queue.drain(100)
        assert calls == []

    def test_next_deadline(self):
        queue = DelayedActionQueue()
        assert queue.next_deadline is None
        queue.schedule(40, lambda: None)
        queue.schedule(20, lambda: None)
        assert queue.next_deadline == 20


class TestEffectTimers:

    def test_active_until_deadline(self):
        effects = EffectTimers()
        effects.trigger("shake", 400, now=100)

        assert effects.is_active("shake", 499)
        assert not effects.is_active("shake", 500)

    def test_retrigger_extends(self):
        effects = EffectTimers()
        effects.trigger("flash", 300, now=0)
        effects.trigger("flash", 100, now=50)
        assert effects.is_active("flash", 250)

    def test_expire(self):
        effects = EffectTimers()
        effects.trigger("flash", 200, now=0)
        effects.trigger("shake", 400, now=0)

        assert effects.expire(300) == ["flash"]
        assert effects.active(300) == ("shake",)
