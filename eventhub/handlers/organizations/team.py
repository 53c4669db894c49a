import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Organization
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch team members')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    organization_id = http.get_path_param(event, 'id')
    members = Organization.fetch_team(database, organization_id)
    return http.get_response(200, {
        'teamMembers': encoding.camelize(members)
    })


@http.handle_errors('Failed to add team member')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    organization_id = http.get_path_param(event, 'id')
    body = http.parse_body(event)
    Organization.add_member(database, organization_id, body.get('UserId'))
    _log.info(f'Added {body.get("UserId")} to the team of {organization_id}')
    return http.get_response(201, {
        'success': True,
        'message': 'Team member added successfully'
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or add the team members of an organization."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
