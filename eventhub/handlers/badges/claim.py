import eventhub.common.db as db
from eventhub.common import http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import BadgeClaim, User
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to claim badge')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    user_id = body.get('UserId')
    if not user_id:
        raise ValidationError('Missing required fields')
    user = User.fetch(database, user_id)
    claim = BadgeClaim.create(database,
                              badge_id=body.get('BadgeId'),
                              user_id=user['Id'],
                              event_id=body.get('EventId'))
    _log.info(f'User {claim["UserId"]} claimed badge {claim["BadgeId"]}')
    return http.get_response(201, {
        'success': True,
        'message': 'Badge claimed successfully'
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Claim a badge for a user."""
    http_method = event['httpMethod']

    if http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
