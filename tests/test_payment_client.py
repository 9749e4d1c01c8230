import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from storefront.domain.errors import PaymentGatewayError
from storefront.services.payment_client import PaystackClient


class StubResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body or {}

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class StubSession:
    """Replays queued responses (or exceptions) and records each call."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def close(self):
        self.closed = True


def make_client(*responses):
    session = StubSession(*responses)
    client = PaystackClient(base_url="https://gw.test/", secret_key="sk_test", timeout=3, session=session)
    return client, session


def test_initialize_posts_payload_and_returns_redirect():
    client, session = make_client(
        StubResponse(200, {"status": True, "data": {"authorization_url": "https://pay.test/abc", "reference": "r1"}})
    )

    tx = client.initialize("a@b.co", 25000, "r1", "https://shop.test/cb", {"first_name": "Ada"})

    assert tx.authorization_url == "https://pay.test/abc"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://gw.test/transaction/initialize")
    assert kwargs["json"]["amount"] == 25000
    assert kwargs["json"]["metadata"] == {"first_name": "Ada"}
    assert kwargs["timeout"] == 3
    assert session.headers["Authorization"] == "Bearer sk_test"


def test_initialize_rejection_raises():
    client, _ = make_client(StubResponse(400, {"status": False, "message": "Invalid key"}))

    with pytest.raises(PaymentGatewayError, match="Invalid key"):
        client.initialize("a@b.co", 100, "r2", "https://shop.test/cb", {})


def test_initialize_is_not_retried_after_a_read_timeout():
    client, session = make_client(requests.ReadTimeout("slow"))

    with pytest.raises(PaymentGatewayError):
        client.initialize("a@b.co", 100, "r3", "https://shop.test/cb", {})
    assert len(session.calls) == 1


def test_verify_parses_a_successful_transaction():
    client, session = make_client(
        StubResponse(
            200,
            {
                "status": True,
                "data": {"status": "success", "amount": 25000, "reference": "r4", "metadata": {"email": "a@b.co"}},
            },
        )
    )

    tx = client.verify("r4")

    assert tx.successful
    assert tx.amount == 25000
    assert tx.metadata == {"email": "a@b.co"}
    assert session.calls[0][1] == "https://gw.test/transaction/verify/r4"


def test_verify_unknown_reference_is_not_successful():
    client, _ = make_client(StubResponse(400, {"status": False, "message": "Transaction reference not found"}))

    tx = client.verify("nope")

    assert not tx.successful


def test_verify_retries_transport_errors_then_gives_up():
    client, session = make_client(
        requests.ConnectionError("reset"),
        StubResponse(502),
        requests.Timeout("slow"),
    )

    with pytest.raises(PaymentGatewayError):
        client.verify("r5")
    assert len(session.calls) == 3


def test_verify_recovers_after_a_transient_error():
    client, session = make_client(
        requests.ConnectionError("reset"),
        StubResponse(200, {"status": True, "data": {"status": "success", "amount": 100}}),
    )

    assert client.verify("r6").successful
    assert len(session.calls) == 2


def test_close_releases_the_session():
    client, session = make_client()
    client.close()
    assert session.closed


def test_verify_rejects_a_malformed_amount():
    client, _ = make_client(StubResponse(200, {"status": True, "data": {"status": "success", "amount": "lots"}}))

    with pytest.raises(PaymentGatewayError, match="malformed amount"):
        client.verify("r7")


def test_verify_ignores_non_mapping_metadata():
    client, _ = make_client(
        StubResponse(200, {"status": True, "data": {"status": "success", "amount": 100, "metadata": "web"}})
    )

    assert client.verify("r8").metadata == {}


class GatewayHandler(BaseHTTPRequestHandler):
    known = {"REALREF"}
    paths = []

    def do_GET(self):
        self.paths.append(self.path)
        reference = self.path.rsplit("/", 1)[-1]
        if self.path.startswith("/transaction/verify/") and reference in self.known:
            status, body = 200, {
                "status": True,
                "data": {"status": "success", "amount": 10000, "reference": reference},
            }
        else:
            status, body = 400, {"status": False, "message": "Transaction reference not found"}

        payload = json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, *args):
        pass


@pytest.fixture
def gateway_server():
    GatewayHandler.paths = []
    server = ThreadingHTTPServer(("127.0.0.1", 0), GatewayHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


def test_reference_is_sent_as_a_single_path_segment(gateway_server):
    session = requests.Session()
    session.trust_env = False
    client = PaystackClient(base_url=gateway_server, secret_key="sk_test", timeout=3, session=session)

    try:
        assert client.verify("REALREF").successful
        aliased = client.verify("x/../REALREF")
    finally:
        client.close()

    assert not aliased.successful
    assert GatewayHandler.paths == ["/transaction/verify/REALREF", "/transaction/verify/x%2F..%2FREALREF"]
