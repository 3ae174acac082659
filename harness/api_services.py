# harness/api_services.py
"""Service objects: one per REST resource, each call wrapped in a logged step."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from harness.api_client import APIClient

DOG_FACTS_URL = "https://dogapi.dog/api/v1/facts"


class UserAPIService:
    users_endpoint = "/users"

    def __init__(self, client: APIClient):
        self.client = client

    @property
    def log(self):
        return self.client.log

    def get_all_users(self, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        with self.log.step("Get all users"):
            return self.client.get(self.users_endpoint, params=params)

    def get_user_by_id(self, user_id: str | int) -> httpx.Response:
        with self.log.step(f"Get user by ID: {user_id}"):
            return self.client.get(f"{self.users_endpoint}/{user_id}")

    def create_user(self, user_data: Dict[str, Any]) -> httpx.Response:
        with self.log.step("Create new user"):
            return self.client.post(self.users_endpoint, user_data)

    def update_user(self, user_id: str | int, user_data: Dict[str, Any]) -> httpx.Response:
        with self.log.step(f"Update user: {user_id}"):
            return self.client.put(f"{self.users_endpoint}/{user_id}", user_data)

    def patch_user(self, user_id: str | int, partial_data: Dict[str, Any]) -> httpx.Response:
        with self.log.step(f"Patch user: {user_id}"):
            return self.client.patch(f"{self.users_endpoint}/{user_id}", partial_data)

    def delete_user(self, user_id: str | int) -> httpx.Response:
        with self.log.step(f"Delete user: {user_id}"):
            return self.client.delete(f"{self.users_endpoint}/{user_id}")

    def search_users(self, query: str) -> httpx.Response:
        with self.log.step(f"Search users: {query}"):
            return self.client.get(self.users_endpoint, params={"q": query})


class DogFactsService:
    """Public dog facts API; responses look like {"facts": [...], "success": true}."""

    def __init__(self, client: APIClient, url: str = DOG_FACTS_URL):
        self.client = client
        self.url = url

    def get_dog_facts(self, number: int = 1) -> httpx.Response:
        with self.client.log.step(f"Get {number} dog fact(s)"):
            return self.client.get(self.url, params={"number": number})


class APIServices:
    def __init__(self, client: APIClient):
        self.client = client
        self.user_service = UserAPIService(client)
        self.dog_facts_service = DogFactsService(client)
