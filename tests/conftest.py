import copy

import pytest

from payloads import make_match_payload


@pytest.fixture
def match_payload():
    return copy.deepcopy(make_match_payload())
