"""User API flows against the configured API_BASE_URL."""

import pytest

from harness.helpers import response_helper
from harness.helpers.request_builder import PayloadBuilder

pytestmark = pytest.mark.e2e


@pytest.fixture(scope="module")
def payloads():
    return PayloadBuilder(seed=1234)


@pytest.fixture
def users(api_services):
    return api_services.user_service


def test_get_all_users(users):
    response = users.get_all_users()

    response_helper.assert_status_code(response, 200)
    response_helper.assert_ok(response)
    assert isinstance(response_helper.parse_json(response), list)


def test_create_user(users, payloads):
    user_data = payloads.build_user_payload({"name": "Test User"})

    response = users.create_user(user_data)

    response_helper.assert_status_code(response, 201)
    created = response_helper.parse_json(response)
    assert "id" in created
    assert created["name"] == user_data["name"]
    assert created["email"] == user_data["email"]


def test_get_user_by_id_matches_schema(users, test_data):
    schema = test_data.get_data("apiData", "userSchema")

    response = users.get_user_by_id(1)

    response_helper.assert_status_code(response, 200)
    for key in ("id", "name", "email"):
        response_helper.assert_contains_key(response, key)
    response_helper.validate_schema(response, schema)
    assert response_helper.extract_data(response, "id") == 1


def test_update_user(users, test_data):
    updated = test_data.get_data("apiData", "updatedUser")

    response = users.update_user(1, updated)

    response_helper.assert_status_code(response, 200)
    response_helper.assert_body_contains(response, {"name": updated["name"]})


def test_patch_user(users, assertions):
    response = users.patch_user(1, {"name": "Partially Updated Name"})

    assertions.to_have_status_code(response, 200)
    assertions.to_contain_response_data(response, {"name": "Partially Updated Name"})


def test_delete_user(users):
    response = users.delete_user(1)
    response_helper.assert_ok(response)


def test_response_time(users):
    response = users.get_all_users()
    response_helper.assert_response_time(response, 5000)
