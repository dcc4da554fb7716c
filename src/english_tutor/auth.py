"""Offline identity provider.

Accepts any email and derives a stable user id from it. It exists so the
tutor can be exercised without a hosted identity service; it does not check
passwords.
"""
import hashlib
import logging

from english_tutor.events import EventChannel, SignedIn, SignedOut

logger = logging.getLogger(__name__)


def user_id_for(email: str) -> str:
    digest = hashlib.sha1(email.strip().lower().encode()).hexdigest()[:12]
    return f"user-{digest}"


class LocalIdentityProvider:
    def __init__(self, channel: EventChannel):
        self.channel = channel
        self.current: SignedIn | None = None

    def sign_in(self, email: str) -> SignedIn:
        email = email.strip()
        if "@" not in email:
            raise ValueError(f"not an email address: {email!r}")
        self.current = SignedIn(user_id=user_id_for(email), email=email)
        logger.info("Signed in %s", email)
        self.channel.publish(self.current)
        return self.current

    def register(self, email: str) -> SignedIn:
        return self.sign_in(email)

    def sign_out(self) -> None:
        if self.current is None:
            return
        logger.info("Signed out %s", self.current.email)
        self.current = None
        self.channel.publish(SignedOut())
