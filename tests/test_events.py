# tests/test_events.py
import pytest

from english_tutor.auth import LocalIdentityProvider, user_id_for
from english_tutor.events import EventChannel, SignedIn, SignedOut


def test_publish_reaches_subscribers_in_order():
    channel = EventChannel()
    seen = []
    channel.subscribe(lambda e: seen.append(("a", e)))
    channel.subscribe(lambda e: seen.append(("b", e)))
    channel.publish(SignedOut())
    assert seen == [("a", SignedOut()), ("b", SignedOut())]


def test_unsubscribe():
    channel = EventChannel()
    seen = []
    unsubscribe = channel.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    channel.publish(SignedOut())
    assert seen == []


def test_user_id_is_stable_and_case_insensitive():
    assert user_id_for("Ann@Example.com") == user_id_for(" ann@example.com ")
    assert user_id_for("ann@example.com") != user_id_for("bob@example.com")
    assert user_id_for("ann@example.com").startswith("user-")


def test_sign_in_and_out_publish_events():
    channel = EventChannel()
    seen = []
    channel.subscribe(seen.append)
    identity = LocalIdentityProvider(channel)

    event = identity.sign_in("ann@example.com")
    assert event == SignedIn(user_id=user_id_for("ann@example.com"), email="ann@example.com")
    assert identity.current == event

    identity.sign_out()
    identity.sign_out()
    assert seen == [event, SignedOut()]
    assert identity.current is None


def test_register_signs_in():
    identity = LocalIdentityProvider(EventChannel())
    assert identity.register("new@example.com").email == "new@example.com"


def test_sign_in_rejects_non_email():
    channel = EventChannel()
    seen = []
    channel.subscribe(seen.append)
    with pytest.raises(ValueError):
        LocalIdentityProvider(channel).sign_in("not-an-email")
    assert seen == []
