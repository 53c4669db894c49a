import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Organization
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch organizations')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    orgs = Organization.fetch_all(database)
    return http.get_response(200, {'organizations': encoding.camelize(orgs)})


@http.handle_errors('Failed to create organization')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    owner_id = body.pop('UserId', None)
    if not body.get('Name') or not owner_id:
        raise ValidationError(
            'Missing required organization fields: name and userId')
    external_id = body.pop('Id', None)
    org = Organization.create(database, owner_id, body,
                              external_id=external_id)
    _log.info(f'Created organization {org["Id"]}')
    return http.get_response(201, {
        'message': 'Organization created successfully',
        'id': org['Id'],
        'organization': encoding.camelize(org)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or create organizations."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
