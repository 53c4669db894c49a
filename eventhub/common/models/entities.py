"""Entities in the database.

The key for an item is composed of the entity name and the key value, eg. for
users: `USER#0b1e5a7cbb3c4c58a4b3c04d6e4bb0d1`.

"""
import eventhub.common.db as db


class Alias(db.EntityName):
    """External identifier of an entity.

    Value: the external id string, eg. 'tech-summit-2024'. The sort key is the
    single sort key of the aliased entity, eg. `#EVENT#`.

    """


class Badge(db.EntityName):
    """Badge that attendees can claim.

    Value: uuid hex.

    """


class Claim(db.EntityName):
    """Badge claim of a user.

    Value: user id.

    """


class Connection(db.EntityName):
    """Connection between two users.

    Value: the sorted user ids joined by '|', eg. 'a1...|b2...'.

    """


class Email(db.EntityName):
    """Email address of a user.

    Value: the email address.

    """


class Event(db.EntityName):
    """Event published by an organization.

    Value: uuid hex.

    """


class Feedback(db.EntityName):
    """Feedback of a user on an event.

    Value: user id.

    """


class Notification(db.EntityName):
    """Notification to a user.

    Value: time-sortable id, see `eventhub.common.models.notification`.

    """


class Org(db.EntityName):
    """Organization.

    Value: uuid hex.

    """


class OrgName(db.EntityName):
    """Unique name of an organization.

    Value: the organization name.

    """


class Outbox(db.EntityName):
    """Pending notification fan-out.

    Value: time-sortable id.

    """


class Registration(db.EntityName):
    """Registration of a user for an event.

    Value: user id.

    """


class Subscriber(db.EntityName):
    """Subscription of a user to an organization.

    Value: user id.

    """


class User(db.EntityName):
    """User profile.

    Value: uuid hex.

    """
