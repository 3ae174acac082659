"""Public dog facts API."""

import pytest

from harness.helpers import response_helper

pytestmark = pytest.mark.e2e


@pytest.mark.parametrize("number", [1, 3])
def test_get_dog_facts(api_services, test_logger, number):
    response = api_services.dog_facts_service.get_dog_facts(number)

    response_helper.assert_status_code(response, 200)
    body = response_helper.parse_json(response)
    assert body["success"] is True
    assert isinstance(body["facts"], list)
    assert len(body["facts"]) == number
    for index, fact in enumerate(body["facts"], start=1):
        assert isinstance(fact, str) and fact
        test_logger.info(f"Fact {index}: {fact}")
