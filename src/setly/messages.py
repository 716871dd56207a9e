"""
Message visibility rules.

A message addressed to "all" reaches players and parents, one addressed to
"coaches" reaches coaches, and one addressed to a player id reaches that
player and that player's parent account. Senders never receive their own
messages. An identity without an id sees nothing.
"""
from setly.models import TO_ALL, TO_COACHES


def _has_id(identity):
    return identity is not None and bool(identity.id)


def is_receiver(message, identity):
    """True if ``identity`` may read ``message`` and did not send it."""
    if not _has_id(identity):
        return False
    if message.sender == identity.id:
        return False
    if message.to == TO_ALL:
        return identity.role in ("player", "parent")
    if message.to == TO_COACHES:
        return identity.role == "coach"
    if not message.to:
        return False
    return identity.id == message.to or identity.player_id == message.to


def is_unread(message, identity):
    """True if ``identity`` is a receiver and has not read the message."""
    if not is_receiver(message, identity):
        return False
    return not message.is_read_by(identity.id)


def is_sent_by(message, identity):
    return _has_id(identity) and message.sender == identity.id


def inbox(messages, identity):
    return [m for m in messages if is_receiver(m, identity)]


def sent(messages, identity):
    return [m for m in messages if is_sent_by(m, identity)]


def unread_count(messages, identity):
    return sum(1 for m in messages if is_unread(m, identity))
