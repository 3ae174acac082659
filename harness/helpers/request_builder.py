# harness/helpers/request_builder.py
"""
Request and payload builders for API tests.

RequestBuilder assembles a RequestSpec fluently; APIClient.send() executes it.
PayloadBuilder produces realistic bodies with Faker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from faker import Faker

HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}


@dataclass
class RequestSpec:
    method: str = "GET"
    endpoint: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


class RequestBuilder:
    def __init__(self):
        self._spec = RequestSpec()

    def set_method(self, method: str) -> "RequestBuilder":
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        self._spec.method = method
        return self

    def set_endpoint(self, endpoint: str) -> "RequestBuilder":
        self._spec.endpoint = endpoint
        return self

    def set_headers(self, headers: Dict[str, str]) -> "RequestBuilder":
        self._spec.headers.update(headers)
        return self

    def add_header(self, key: str, value: str) -> "RequestBuilder":
        self._spec.headers[key] = value
        return self

    def set_query_params(self, params: Dict[str, Any]) -> "RequestBuilder":
        self._spec.params.update(params)
        return self

    def add_query_param(self, key: str, value: Any) -> "RequestBuilder":
        self._spec.params[key] = value
        return self

    def set_body(self, body: Any) -> "RequestBuilder":
        self._spec.body = body
        return self

    def set_auth_token(self, token: str) -> "RequestBuilder":
        self._spec.headers["Authorization"] = f"Bearer {token}"
        return self

    def build(self) -> RequestSpec:
        s = self._spec
        return RequestSpec(
            method=s.method,
            endpoint=s.endpoint,
            headers=dict(s.headers),
            params=dict(s.params),
            body=s.body,
        )

    def reset(self) -> "RequestBuilder":
        self._spec = RequestSpec()
        return self


# ==================== Payloads ====================

class PayloadBuilder:
    """Faker-backed payload factories. Overrides win over generated fields."""

    ORDER_STATUSES = ["pending", "processing", "shipped", "delivered"]

    def __init__(self, locale: str = "en_US", seed: Optional[int] = None):
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)

    def build_user_payload(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        f = self.faker
        return {
            "name": f.name(),
            "email": f.email(),
            "password": f.password(length=12),
            "phone": f.phone_number(),
            "address": {
                "street": f.street_address(),
                "city": f.city(),
                "state": f.state(),
                "zipCode": f.postcode(),
                "country": f.country(),
            },
            **(overrides or {}),
        }

    def build_product_payload(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        f = self.faker
        return {
            "name": f"{f.color_name()} {f.word().title()}",
            "description": f.sentence(nb_words=12),
            "price": f.pyfloat(right_digits=2, min_value=1, max_value=1000),
            "category": f.word().title(),
            "sku": f.bothify("??########").upper(),
            "inStock": f.pybool(),
            "quantity": f.random_int(min=0, max=1000),
            **(overrides or {}),
        }

    def build_order_payload(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        f = self.faker
        return {
            "orderId": f.uuid4(),
            "customerId": f.uuid4(),
            "items": [
                {
                    "productId": f.uuid4(),
                    "quantity": f.random_int(min=1, max=5),
                    "price": f.pyfloat(right_digits=2, min_value=1, max_value=1000),
                }
            ],
            "totalAmount": f.pyfloat(right_digits=2, min_value=100, max_value=1000),
            "orderDate": f.date_time_this_month().isoformat(),
            "status": f.random_element(self.ORDER_STATUSES),
            **(overrides or {}),
        }

    @staticmethod
    def build_from_template(template: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
        return {key: generator() for key, generator in template.items()}

    @staticmethod
    def build_array(builder: Callable[[], Any], count: int) -> List[Any]:
        return [builder() for _ in range(count)]
