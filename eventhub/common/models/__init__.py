# flake8: noqa
# mypy: implicit-reexport

# Models are modules of functions, they're exported with class-like names,
# eg. `Event.fetch(database, event_id)`.

import eventhub.common.models.badge as Badge
import eventhub.common.models.badge_claim as BadgeClaim
import eventhub.common.models.connection as Connection
import eventhub.common.models.event as Event
import eventhub.common.models.feedback as Feedback
import eventhub.common.models.notification as Notification
import eventhub.common.models.organization as Organization
import eventhub.common.models.outbox as Outbox
import eventhub.common.models.registration as Registration
import eventhub.common.models.stats as Stats
import eventhub.common.models.subscription as Subscription
import eventhub.common.models.user as User
