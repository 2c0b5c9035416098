"""Correlation IDs across API calls: headers on every response, IDs in domain logs."""

import logging

import pytest

pytestmark = pytest.mark.integration


def _records_with(caplog, text):
    return [r.getMessage() for r in caplog.records if text in r.getMessage()]


class TestCorrelationIdOnApiResponses:
    def test_error_responses_echo_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/orders/my-orders")

        assert response.status_code == 401
        assert response["X-Request-ID"] == cid

    def test_each_request_gets_its_own_id(self, api_client):
        first = api_client.get("/api/v1/products")["X-Request-ID"]
        second = api_client.get("/api/v1/products")["X-Request-ID"]
        assert first != second


class TestCorrelationIdInDomainLogs:
    def test_order_creation_logs_carry_request_id(
        self, client_for, buyer, product, caplog
    ):
        cid = "order-flow-correlation-789"
        client = client_for(buyer)

        with caplog.at_level(logging.INFO):
            response = client.post(
                "/api/v1/orders",
                {
                    "products": [{"product": str(product.id), "quantity": 1}],
                    "shippingAddress": {
                        "street": "1 Rd",
                        "city": "Accra",
                        "country": "Ghana",
                    },
                    "paymentMethod": "cash",
                },
                format="json",
                HTTP_X_REQUEST_ID=cid,
            )

        assert response.status_code == 201
        created = _records_with(caplog, "order.created")
        assert created
        assert all(cid in message for message in created)

    def test_previous_request_id_does_not_leak(self, api_client, caplog):
        api_client.get("/api/v1/products", HTTP_X_REQUEST_ID="first-request-id")
        caplog.clear()

        with caplog.at_level(logging.INFO):
            api_client.get("/api/v1/products", HTTP_X_REQUEST_ID="second-request-id")

        finished = _records_with(caplog, "request_finished")
        assert finished
        assert not any("first-request-id" in message for message in finished)
