import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Badge, BadgeClaim, User
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch badges')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    query = Badge.BadgeQuery(event_id=http.get_query_param(event, 'eventId'))
    badges = Badge.fetch_all(database, query)
    user_id = http.get_query_param(event, 'userId')
    if user_id is not None:
        user = User.fetch(database, user_id)
        claimed = BadgeClaim.fetch_claimed_badge_ids(database, user['Id'])
        for b in badges:
            b['Claimed'] = b['Id'] in claimed
    return http.get_response(200, {'badges': encoding.camelize(badges)})


@http.handle_errors('Failed to create badge')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    badge = Badge.create(database, body)
    _log.info(f'Created {badge["Type"]} badge {badge["Id"]}')
    return http.get_response(201, {
        'success': True,
        'message': 'Badge created successfully',
        'badgeId': badge['Id']
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or create badges."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
