from voice_chat.state.messages import Message, MessageStore, Role


def test_append_preserves_order() -> None:
    store = MessageStore()
    store.append(Message("a", Role.USER))
    store.append(Message("b", Role.ASSISTANT))
    store.append(Message("a", Role.USER))
    assert [m.text for m in store.all()] == ["a", "b", "a"]
    assert store.last() == Message("a", Role.USER)
    assert store[1].role is Role.ASSISTANT


def test_all_returns_snapshot() -> None:
    store = MessageStore()
    store.append(Message("a", Role.USER))
    snapshot = store.all()
    store.append(Message("b", Role.ASSISTANT))
    assert len(snapshot) == 1
    assert len(store) == 2


def test_clear_is_idempotent() -> None:
    store = MessageStore()
    store.append(Message("a", Role.USER))
    store.clear()
    store.clear()
    assert store.all() == ()
    assert store.last() is None


def test_listeners_notified_on_change() -> None:
    store = MessageStore()
    seen: list[int] = []
    store.bind(lambda s: seen.append(len(s)))
    store.append(Message("a", Role.USER))
    store.clear()
    store.clear()
    assert seen == [1, 0]


def test_messages_are_immutable() -> None:
    message = Message("a", Role.USER)
    try:
        message.text = "b"  # type: ignore[misc]
    except AttributeError:
        pass
    else:  # pragma: no cover
        raise AssertionError("message should be frozen")
    assert message.is_user
