from __future__ import annotations

from qiwi.domain.exceptions import ConfigError, HttpStatusError, NetworkError, ParseError, QiwiError


def test_http_status_error_is_retryable_only_for_throttling_and_server_errors():
    assert HttpStatusError(503, "unavailable").retryable is True
    assert HttpStatusError(429, "slow down").retryable is True
    assert HttpStatusError(400, "bad").retryable is False
    assert HttpStatusError(403, "no").code == "FORBIDDEN"


def test_to_dict_is_flat_and_log_safe():
    body = "x" * 2000
    record = HttpStatusError(500, body).to_dict()

    assert record["category"] == "transport"
    assert record["code"] == "HTTP_ERROR"
    assert record["status_code"] == 500
    assert record["retryable"] is True
    assert body not in record["message"]


def test_parse_error_keeps_raw_text_but_logs_preview():
    raw = "<html>\n  <body>502</body>\n</html>"
    error = ParseError("not json", raw_text=raw)

    assert error.raw_text == raw
    assert error.to_dict()["raw_text"] == "<html> <body>502</body> </html>"


def test_categories():
    assert NetworkError("down").to_dict()["category"] == "transport"
    assert NetworkError("down").retryable is True
    assert QiwiError("payment.limit").to_dict()["description"] == "payment.limit"
    assert ConfigError("missing").category == "config"
    assert str(ConfigError("missing")) == "missing"
