"""Statistics of events and organizations for organizer dashboards."""
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping

import eventhub.common.db as db
from eventhub.common.models import event as Event
from eventhub.common.models import feedback as Feedback
from eventhub.common.models import registration as Registration
from eventhub.common.models import subscription as Subscription
from eventhub.common.models import user as User

_LATEST_COMMENTS = 10


def _count_by_date(items: Iterable[Mapping[str, Any]]) \
        -> List[Dict[str, Any]]:
    # `CreatedAt` is an ISO timestamp, the first 10 characters are the date.
    counter = Counter(i['CreatedAt'][:10] for i in items if i.get('CreatedAt'))
    return [{'Date': d, 'Count': c} for d, c in sorted(counter.items())]


def _count_ratings(feedback: Iterable[Mapping[str, Any]]) \
        -> List[Dict[str, Any]]:
    counter = Counter(int(f['Rating']) for f in feedback)
    return [{'Rating': r, 'Count': c} for r, c in sorted(counter.items())]


def _count_demographics(database: db.Database,
                        registrations: List[Mapping[str, Any]]) \
        -> List[Dict[str, Any]]:
    users = User.fetch_many(database, [r['UserId'] for r in registrations])
    counter: Counter = Counter()
    for r in registrations:
        user = users.get(r['UserId'])
        if user is None:
            continue
        counter[(user.get('Position'), user.get('Organization'))] += 1
    return [{'Position': p, 'Organization': o, 'Count': c}
            for (p, o), c in counter.items()]


def _check_in_stats(registrations: List[Mapping[str, Any]]) \
        -> Dict[str, Any]:
    total = len(registrations)
    checked_in = sum(1 for r in registrations if r.get('CheckedIn'))
    return {
        'TotalRegistrations': total,
        'CheckedIn': checked_in,
        'CheckInRate': checked_in / total if total else 0,
    }


def get_event_stats(database: db.Database, event_id: str) -> Dict[str, Any]:
    """Get the registration and feedback statistics of an event.

    Args:
        database: The database.
        event_id: The native or external id of the event.

    Returns:
        Registrations per day, check-in rate, attendee demographics, rating
        histogram and the latest comments.

    Raises:
        `NotFoundError` if the event doesn't exist.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    event = Event.fetch(database, event_id)
    registrations = Registration.fetch_all(database, event['Id'])
    feedback = Feedback.fetch_all(database, event['Id'])
    comments = [f for f in feedback if f.get('Comment')]
    return {
        'RegistrationOverTime': _count_by_date(registrations),
        'CheckInStats': _check_in_stats(registrations),
        'AttendeeRatings': _count_ratings(feedback),
        'AttendeeDemographics': _count_demographics(database, registrations),
        'FeedbackComments': comments[:_LATEST_COMMENTS],
    }


def _fetch_organization_events(database: db.Database,
                               org: Mapping[str, Any]) \
        -> List[Dict[str, Any]]:
    # Events may refer to the organization by its native or external id.
    org_ids = [org['Id']]
    if org.get('ExternalId'):
        org_ids.append(org['ExternalId'])
    events: Dict[str, Dict[str, Any]] = {}
    for org_id in org_ids:
        query = Event.EventQuery(organization_id=org_id)
        for e in Event.fetch_all(database, query):
            events[e['Id']] = e
    return sorted(events.values(), key=lambda e: e.get('CreatedAt', ''),
                  reverse=True)


def get_organization_stats(database: db.Database, org: Mapping[str, Any]) \
        -> Dict[str, Any]:
    """Get the statistics of the events of an organization.

    Args:
        database: The database.
        org: The organization.

    Returns:
        Subscriptions per day, registrations and check-ins per event,
        attendee demographics and the rating histogram across all events.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    events = _fetch_organization_events(database, org)
    subscriptions = Subscription.fetch_all(database, org['Id'])

    registration_stats = []
    all_registrations: List[Mapping[str, Any]] = []
    all_feedback: List[Mapping[str, Any]] = []
    for e in events:
        registrations = Registration.fetch_all(database, e['Id'])
        all_registrations.extend(registrations)
        all_feedback.extend(Feedback.fetch_all(database, e['Id']))
        if not registrations:
            continue
        stats = _check_in_stats(registrations)
        registration_stats.append({
            'EventId': e['Id'],
            'EventName': e.get('Title', 'Unknown Event'),
            'TotalRegistrations': stats['TotalRegistrations'],
            'CheckedIn': stats['CheckedIn'],
        })

    return {
        'SubscriptionStats': _count_by_date(subscriptions),
        'RegistrationStats': registration_stats,
        'AttendeeDemographics': _count_demographics(database,
                                                    all_registrations),
        'AttendeeRatings': _count_ratings(all_feedback),
        'TotalEvents': len(events),
        'EventIds': [e['Id'] for e in events],
    }
