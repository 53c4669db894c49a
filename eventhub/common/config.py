"""App configuration.

Settings come from two places: the Lambda environment (region, table and
index names) and the CloudFormation parameter file of the deployment target
in `configs/<target>.json`. The configuration is loaded on first access of
`eventhub.common.config.config`.

"""
import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, NamedTuple, Optional, TypedDict


_CONFIGS_DIR = Path(__file__).parent / 'configs'
_DEFAULT_TARGET = 'dev'


class Config(NamedTuple):
    """App configuration."""

    aws_region: str
    inverse_index: str
    log_level: str
    main_table: str
    # Default page size of the notifications of a user.
    notification_limit: int
    # Undelivered outbox items are removed by DynamoDB TTL after this.
    outbox_ttl: int
    subscriber_page_size: int
    website_origin: str


class StackParam(TypedDict):
    """CloudFormation stack parameter.

    .. _AWS docs:
        https://docs.aws.amazon.com/AWSCloudFormation/latest/APIReference/API_Parameter.html
    """

    ParameterKey: str
    ParameterValue: str


def _to_dict(params: List[StackParam]) -> Dict[str, str]:
    return {p['ParameterKey']: p['ParameterValue'] for p in params}


def _build_config(env: Mapping[str, str], params: List[StackParam]) \
        -> Config:
    """Build the configuration from the environment and stack parameters.

    Missing environment variables get placeholder values, so that unit tests
    can import the handlers without a deployment.

    Args:
        env: The process environment (os.environ).
        params: The stack parameters of the deployment target.

    Returns:
        The configuration object.

    Raises:
        KeyError if `LogLevel` or `WebsiteOrigin` is missing from the
            parameters.

    """
    pdict = _to_dict(params)
    log_level = 'WARNING' if env.get('TOX_TESTENV') else pdict['LogLevel']
    return Config(
        aws_region=env.get('AWS_REGION', 'UnknownRegion'),
        inverse_index=env.get('INVERSE_INDEX_NAME', 'InverseIndex'),
        log_level=log_level,
        main_table=env.get('MAIN_TABLE_NAME', 'UnknownTableName'),
        notification_limit=int(pdict.get('NotificationLimit', '100')),
        outbox_ttl=(7 * 24 * 60 * 60),  # seconds
        subscriber_page_size=int(pdict.get('SubscriberPageSize', '50')),
        # The template needs the origin quoted, the app doesn't.
        website_origin=pdict['WebsiteOrigin'].strip('\''),
    )


def _load_params(target: str) -> List[StackParam]:
    with open(_CONFIGS_DIR / f'{target}.json') as f:
        params: List[StackParam] = json.load(f)
    return params


_config: Optional[Config] = None


def _get_config() -> Config:
    global _config
    if _config is None:
        target = os.environ.get('DEPLOYMENT_TARGET', _DEFAULT_TARGET)
        _config = _build_config(os.environ, _load_params(target))
    return _config


def __getattr__(name: str) -> Config:
    if name == 'config':
        return _get_config()
    raise AttributeError(f'module {__name__} has no attribute {name}')
