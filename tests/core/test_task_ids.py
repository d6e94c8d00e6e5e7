import uuid

import pytest
import slugid

from app.core.task_ids import is_slugid


def test_generated_ids_match_pattern():
    for _ in range(100):
        assert is_slugid(slugid.v4())
        assert is_slugid(slugid.nice())

def test_known_encoding_matches_pattern():
    value = slugid.encode(uuid.UUID("804f3fc8-dfcb-4f37-8fa3-5fdd2f3c2a7a"))

    assert value == "gE8_yN_LTzePo1_dLzwqeg"
    assert is_slugid(value)

@pytest.mark.parametrize("value", [
    "",
    "short",
    "dSlITZ4yQgmvxxAi4A8fHQ=",
    "dSlITZ4yAgmvxxAi4A8fHQ",  # version nibble isn't 4
    "dSlITZ4y Qgmvxx4A8fHQ",
    "dSlITZ4yQgmvxxAi4A8fHQ\n",
    None,
])
def test_is_slugid_rejects(value):
    assert not is_slugid(value)
