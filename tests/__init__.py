# flake8: noqa
from tests.test_base import TestBase
