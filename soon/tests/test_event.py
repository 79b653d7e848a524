import unittest
from unittest.mock import Mock

from soon import EventEmitter


class EventEmitterTests(unittest.TestCase):
    def test_emit_in_subscription_order(self) -> None:
        emitter = EventEmitter()
        order = []
        emitter.subscribe("tick", lambda p: order.append(("a", p)))
        emitter.subscribe("tick", lambda p: order.append(("b", p)))
        self.assertTrue(emitter.emit("tick", 1))
        self.assertEqual(order, [("a", 1), ("b", 1)])

    def test_emit_without_handlers(self) -> None:
        emitter = EventEmitter()
        self.assertFalse(emitter.emit("tick"))

    def test_unsubscribe_unknown(self) -> None:
        emitter = EventEmitter()
        emitter.unsubscribe("tick", Mock())
        emitter.subscribe("tick", Mock())
        emitter.unsubscribe("tick", Mock())
        self.assertEqual(emitter.listener_count("tick"), 1)

    def test_duplicate_subscriptions(self) -> None:
        emitter = EventEmitter()
        handler = Mock()
        emitter.subscribe("tick", handler)
        emitter.subscribe("tick", handler)
        emitter.emit("tick", "x")
        self.assertEqual(handler.call_count, 2)
        emitter.unsubscribe("tick", handler)
        self.assertEqual(emitter.listener_count("tick"), 1)

    def test_changes_during_dispatch_apply_next_time(self) -> None:
        emitter = EventEmitter()
        late = Mock()

        def first(payload: object) -> None:
            emitter.unsubscribe("tick", first)
            emitter.subscribe("tick", late)

        emitter.subscribe("tick", first)
        emitter.emit("tick", 1)
        late.assert_not_called()
        emitter.emit("tick", 2)
        late.assert_called_once_with(2)

    def test_handler_exception_propagates(self) -> None:
        emitter = EventEmitter()
        emitter.subscribe("tick", Mock(side_effect=KeyError("boom")))
        with self.assertRaises(KeyError):
            emitter.emit("tick")


if __name__ == "__main__":
    unittest.main()
