"""
Tests pour l'identification du client (adresse réseau vs X-Forwarded-For).
"""

from unittest.mock import Mock

import pytest
from fastapi import Request

from backend.apigw.auth_utils import UNKNOWN_ADDRESS, extract_client_address


def create_mock_request(headers: dict[str, str] | None = None, host: str | None = "10.0.0.5") -> Request:
    request = Mock(spec=Request)
    request.headers = headers or {}
    request.client = Mock(host=host) if host else None
    return request


class TestExtractClientAddress:
    def test_connection_address_by_default(self) -> None:
        request = create_mock_request({"X-Forwarded-For": "203.0.113.7"})
        assert extract_client_address(request) == "10.0.0.5"

    def test_forwarded_first_hop_when_trusted(self) -> None:
        request = create_mock_request({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1"})
        assert extract_client_address(request, trust_proxy=True) == "203.0.113.7"

    @pytest.mark.parametrize("forwarded", ["", " , 10.0.0.1"])
    def test_empty_forwarded_falls_back(self, forwarded: str) -> None:
        request = create_mock_request({"X-Forwarded-For": forwarded})
        assert extract_client_address(request, trust_proxy=True) == "10.0.0.5"

    def test_unknown_without_client(self) -> None:
        assert extract_client_address(create_mock_request(host=None)) == UNKNOWN_ADDRESS
