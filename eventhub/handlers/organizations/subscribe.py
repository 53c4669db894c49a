from typing import Tuple

import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Organization, Subscription, User
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


def _get_ids(database: db.Database, event: ProxyEvent) -> Tuple[str, str]:
    # The organization and the user are resolved to their native ids.
    org = Organization.fetch(database, http.get_path_param(event, 'id'))
    body = http.parse_body(event)
    user = User.fetch(database, body.get('UserId'))
    return org['Id'], user['Id']


@http.handle_errors('Failed to unsubscribe from organization')
def _delete_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    organization_id, user_id = _get_ids(database, event)
    was_subscribed = Subscription.delete(database, organization_id, user_id)
    return http.get_response(200, {
        'success': True,
        'wasSubscribed': was_subscribed
    })


@http.handle_errors('Failed to fetch subscribers')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    org = Organization.fetch(database, http.get_path_param(event, 'id'))
    if http.get_query_param(event, 'countOnly') == 'true':
        return http.get_response(200, {
            'success': True,
            'subscriberCount': Subscription.count(database, org['Id'])
        })

    limit = http.get_int_query_param(event, 'limit',
                                     config.subscriber_page_size)
    page_num = http.get_int_query_param(event, 'page', 1)
    page = Subscription.fetch_page(database, org['Id'], page_num, limit)
    return http.get_response(200, {
        'success': True,
        'subscribers': encoding.camelize(page.subscribers),
        'pagination': {
            'total': page.total,
            'page': page.page,
            'limit': page.limit,
            'pages': page.pages,
        }
    })


@http.handle_errors('Failed to subscribe to organization')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    organization_id, user_id = _get_ids(database, event)
    is_new = Subscription.create(database, organization_id, user_id)
    if is_new:
        _log.info(f'User {user_id} subscribed to {organization_id}')
    return http.get_response(200, {
        'success': True,
        'isNewSubscription': is_new
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Subscribe to, unsubscribe from or list the subscribers of an org."""
    http_method = event['httpMethod']

    if http_method == 'DELETE':
        return _delete_handler(_database, event)
    elif http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
