r"""Unit tests for HttpCommand execution with a synchronous client."""

from __future__ import annotations

import io
import json
from typing import Any
from unittest.mock import Mock

import httpx
import pytest

from apicommand import (
    AuthorizationError,
    ClientError,
    CommandHooks,
    ConfigurationError,
    HttpCommand,
    HttpMethod,
    RateLimitError,
    RedirectError,
    RequestOptions,
    ServerError,
    TransmissionError,
)
from apicommand.core.config import FORM_CONTENT_TYPE, configure_defaults
from tests.helpers import (
    TEST_URL,
    RecordingCredential,
    SigningCredential,
    create_mock_client,
    create_response,
)


class TrackingHooks(CommandHooks):
    def __init__(self) -> None:
        self.released = 0

    def release(self, command: HttpCommand) -> None:
        self.released += 1


class JsonHooks(CommandHooks):
    def decode_response_body(self, content_type: str | None, body: bytes) -> Any:
        if content_type and content_type.startswith("application/json"):
            return json.loads(body)
        return body


class ReadOnlyStream:
    def __init__(self, data: bytes, seekable: bool | None = None) -> None:
        self._data = data
        self.reads = 0
        if seekable is not None:
            self.seek = lambda offset: None
            self.seekable = lambda: seekable

    def read(self) -> bytes:
        self.reads += 1
        data, self._data = self._data, b""
        return data


def sent_headers(client: Mock, call: int = 0) -> httpx.Headers:
    return client.request.call_args_list[call].kwargs["headers"]


#################################
#     Tests for HttpCommand     #
#################################


def test_http_command_init() -> None:
    command = HttpCommand("get", TEST_URL)
    assert command.method == HttpMethod.GET
    assert command.url == TEST_URL
    assert command.body is None
    assert command.query == {}
    assert command.params == {}
    assert command.form_encoded is None
    assert command.response is None
    assert command.attempts == 0
    assert not command.prepared
    assert isinstance(command.hooks, CommandHooks)


def test_http_command_options_are_copied() -> None:
    options = RequestOptions(retries=2, header={"X-Trace": "1"})
    command = HttpCommand("GET", TEST_URL, options=options)
    command.options.header["X-Trace"] = "2"
    assert command.options is not options
    assert options.header == {"X-Trace": "1"}


def test_http_command_default_options() -> None:
    configure_defaults(retries=5)
    assert HttpCommand("GET", TEST_URL).options.retries == 5


def test_http_command_invalid_method() -> None:
    with pytest.raises(ValueError, match=r"Unsupported HTTP method"):
        HttpCommand("FETCH", TEST_URL)


def test_http_command_repr() -> None:
    assert repr(HttpCommand("GET", TEST_URL)) == f"HttpCommand(method=GET, url={TEST_URL!r})"


def test_http_command_prepare_once() -> None:
    command = HttpCommand(
        "GET", "https://api.example.com/files/{fileId}", params={"fileId": "abc"}
    )
    command.prepare()
    command.params["fileId"] = "xyz"
    command.prepare()
    assert command.prepared
    assert str(command.url) == "https://api.example.com/files/abc"


def test_http_command_authorization_refreshable() -> None:
    assert HttpCommand(
        "GET", TEST_URL, options=RequestOptions(authorization=RecordingCredential())
    ).authorization_refreshable()
    assert not HttpCommand(
        "GET", TEST_URL, options=RequestOptions(authorization="token")
    ).authorization_refreshable()


def test_http_command_execute_success(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(200, content=b"data")])
    command = HttpCommand("GET", TEST_URL)
    assert command.execute(client) == b"data"
    client.request.assert_called_once_with(
        "GET",
        TEST_URL,
        headers=sent_headers(client),
        content=None,
        follow_redirects=True,
    )
    assert command.attempts == 1
    assert command.response.status_code == 200
    mock_sleep.assert_not_called()


def test_http_command_execute_expands_template() -> None:
    client = create_mock_client([create_response(200)])
    HttpCommand(
        "GET",
        "https://api.example.com/v1/{bucket}/files/{fileId}",
        params={"bucket": "media", "fileId": "a b"},
        query={"fields": "name"},
    ).execute(client)
    assert client.request.call_args.args[1] == (
        "https://api.example.com/v1/media/files/a%20b?fields=name"
    )


def test_http_command_execute_optional_query_variable() -> None:
    client = create_mock_client([create_response(200, content=b"ok")])
    callback = Mock()
    command = HttpCommand(
        "GET", "https://api.example.com/v1/files/{fileId}{?fields}", params={"fileId": "abc"}
    )
    assert command.execute(client, callback) == b"ok"
    callback.assert_called_once_with(b"ok", None)
    assert client.request.call_args.args[1] == "https://api.example.com/v1/files/abc"


def test_http_command_execute_query_wins_over_url() -> None:
    client = create_mock_client([create_response(200)])
    HttpCommand("GET", httpx.URL(f"{TEST_URL}?a=0&c=3"), query={"a": 1}).execute(client)
    assert client.request.call_args.args[1] == f"{TEST_URL}?a=1&c=3"


def test_http_command_execute_missing_template_variable() -> None:
    client = create_mock_client([create_response(200)])
    hooks = TrackingHooks()
    command = HttpCommand("GET", "https://api.example.com/files/{fileId}", hooks=hooks)
    with pytest.raises(ConfigurationError, match=r"fileId"):
        command.execute(client)
    client.request.assert_not_called()
    assert hooks.released == 1


def test_http_command_execute_form_encoded() -> None:
    client = create_mock_client([create_response(200)])
    command = HttpCommand("POST", TEST_URL, query={"a": 1, "b": "x y"})
    command.execute(client)
    assert command.form_encoded
    assert client.request.call_args.args[1] == TEST_URL
    assert client.request.call_args.kwargs["content"] == b"a=1&b=x+y"
    assert sent_headers(client)["Content-Type"] == FORM_CONTENT_TYPE


def test_http_command_execute_not_form_encoded_with_body() -> None:
    client = create_mock_client([create_response(200)])
    command = HttpCommand("PUT", TEST_URL, body=b"payload", query={"a": 1})
    command.execute(client)
    assert command.form_encoded is False
    assert client.request.call_args.args[1] == f"{TEST_URL}?a=1"
    assert client.request.call_args.kwargs["content"] == b"payload"


def test_http_command_execute_retries_server_errors(mock_sleep: Mock) -> None:
    client = create_mock_client(
        [create_response(503), create_response(500), create_response(200, content=b"ok")]
    )
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3))
    assert command.execute(client) == b"ok"
    assert client.request.call_count == 3
    assert command.attempts == 3
    assert [call.args[0] for call in mock_sleep.call_args_list] == [1.0, 2.0]


def test_http_command_execute_retries_exhausted(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(503)] * 4)
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3))
    with pytest.raises(ServerError) as exc_info:
        command.execute(client)
    assert exc_info.value.status_code == 503
    assert client.request.call_count == 4
    assert [call.args[0] for call in mock_sleep.call_args_list] == [1.0, 2.0, 4.0]


def test_http_command_execute_rate_limit(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(429), create_response(200)])
    HttpCommand("GET", TEST_URL, options=RequestOptions(retries=1)).execute(client)
    assert client.request.call_count == 2
    mock_sleep.assert_called_once_with(1.0)


def test_http_command_execute_rate_limit_retry_after(mock_sleep: Mock) -> None:
    client = create_mock_client(
        [create_response(429, headers={"Retry-After": "5"}), create_response(200)]
    )
    options = RequestOptions(retries=1, respect_retry_after=True)
    HttpCommand("GET", TEST_URL, options=options).execute(client)
    mock_sleep.assert_called_once_with(5.0)


def test_http_command_execute_rate_limit_exhausted(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(429)])
    with pytest.raises(RateLimitError, match=r"Rate limit exceeded"):
        HttpCommand("GET", TEST_URL).execute(client)
    mock_sleep.assert_not_called()


@pytest.mark.parametrize("status_code", [304, 400, 403, 404, 409, 422])
def test_http_command_execute_client_error_not_retried(
    mock_sleep: Mock, status_code: int
) -> None:
    client = create_mock_client([create_response(status_code, content=b"bad")])
    with pytest.raises(ClientError) as exc_info:
        HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3)).execute(client)
    assert exc_info.value.status_code == status_code
    assert exc_info.value.body == b"bad"
    client.request.assert_called_once()
    mock_sleep.assert_not_called()


def test_http_command_execute_redirect_not_retried(mock_sleep: Mock) -> None:
    client = create_mock_client(
        [create_response(302, headers={"Location": "https://other.example.com/"})]
    )
    with pytest.raises(RedirectError, match=r"Redirect to https://other.example.com/"):
        HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3)).execute(client)
    client.request.assert_called_once()
    mock_sleep.assert_not_called()


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
        OSError("network unreachable"),
    ],
)
def test_http_command_execute_transport_errors_retried(mock_sleep: Mock, exc: Exception) -> None:
    client = create_mock_client([exc, create_response(200, content=b"ok")])
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(retries=2))
    assert command.execute(client) == b"ok"
    assert client.request.call_count == 2
    mock_sleep.assert_called_once_with(1.0)


def test_http_command_execute_transport_error_exhausted(mock_sleep: Mock) -> None:
    exc = httpx.ConnectError("connection refused")
    client = create_mock_client([exc, exc])
    with pytest.raises(TransmissionError, match=r"connection refused") as exc_info:
        HttpCommand("GET", TEST_URL, options=RequestOptions(retries=1)).execute(client)
    assert exc_info.value.cause is exc
    assert exc_info.value.__cause__ is exc


def test_http_command_execute_http_status_error(mock_sleep: Mock) -> None:
    request = httpx.Request("GET", TEST_URL)
    exc = httpx.HTTPStatusError(
        "Server error", request=request, response=create_response(502)
    )
    client = create_mock_client([exc, create_response(200)])
    HttpCommand("GET", TEST_URL, options=RequestOptions(retries=1)).execute(client)
    assert client.request.call_count == 2


def test_http_command_execute_unexpected_error_propagates(mock_sleep: Mock) -> None:
    client = create_mock_client([RuntimeError("boom"), create_response(200)])
    with pytest.raises(RuntimeError, match=r"boom"):
        HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3)).execute(client)
    client.request.assert_called_once()
    mock_sleep.assert_not_called()


def test_http_command_execute_unknown_status(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(600), create_response(200)])
    HttpCommand("GET", TEST_URL, options=RequestOptions(retries=1)).execute(client)
    assert client.request.call_count == 2


#########################################
#     Tests for authorization retry     #
#########################################


def test_http_command_execute_bearer_token() -> None:
    client = create_mock_client([create_response(200)])
    HttpCommand("GET", TEST_URL, options=RequestOptions(authorization="secret")).execute(client)
    assert sent_headers(client)["Authorization"] == "Bearer secret"


def test_http_command_execute_refreshes_credential(mock_sleep: Mock) -> None:
    credential = RecordingCredential()
    client = create_mock_client([create_response(401), create_response(200, content=b"ok")])
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(authorization=credential))
    assert command.execute(client) == b"ok"
    assert credential.refreshed == 1
    assert sent_headers(client, 0)["Authorization"] == "Bearer token-1"
    assert sent_headers(client, 1)["Authorization"] == "Bearer token-2"
    mock_sleep.assert_not_called()


def test_http_command_execute_second_unauthorized(mock_sleep: Mock) -> None:
    credential = RecordingCredential()
    client = create_mock_client([create_response(401)] * 3)
    command = HttpCommand(
        "GET", TEST_URL, options=RequestOptions(retries=3, authorization=credential)
    )
    with pytest.raises(AuthorizationError, match=r"Unauthorized"):
        command.execute(client)
    assert client.request.call_count == 2
    assert credential.refreshed == 1
    mock_sleep.assert_not_called()


def test_http_command_execute_unauthorized_without_refresh(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(401), create_response(200)])
    command = HttpCommand(
        "GET", TEST_URL, options=RequestOptions(retries=3, authorization="secret")
    )
    with pytest.raises(AuthorizationError):
        command.execute(client)
    client.request.assert_called_once()


def test_http_command_execute_unauthorized_after_transient_error(mock_sleep: Mock) -> None:
    credential = RecordingCredential()
    client = create_mock_client([create_response(503), create_response(401), create_response(200)])
    command = HttpCommand(
        "GET", TEST_URL, options=RequestOptions(retries=3, authorization=credential)
    )
    with pytest.raises(AuthorizationError):
        command.execute(client)
    assert client.request.call_count == 2
    assert credential.refreshed == 0


def test_http_command_execute_transient_error_after_refresh(mock_sleep: Mock) -> None:
    credential = RecordingCredential()
    client = create_mock_client([create_response(401), create_response(503), create_response(200)])
    command = HttpCommand(
        "GET", TEST_URL, options=RequestOptions(retries=1, authorization=credential)
    )
    command.execute(client)
    assert client.request.call_count == 3
    assert credential.refreshed == 1
    mock_sleep.assert_called_once_with(1.0)


#####################################
#     Tests for request headers     #
#####################################


def test_http_command_request_header_default_headers() -> None:
    client = create_mock_client([create_response(200)])
    options = RequestOptions(header={"User-Agent": "demo/1.0", "Accept": "application/json"})
    HttpCommand("GET", TEST_URL, header={"Accept": "text/plain"}, options=options).execute(
        client
    )
    headers = sent_headers(client)
    assert headers["User-Agent"] == "demo/1.0"
    assert headers["Accept"] == "text/plain"


def test_http_command_request_header_explicit_wins_over_credential() -> None:
    command = HttpCommand(
        "GET",
        TEST_URL,
        header={"X-Signed": "false"},
        options=RequestOptions(authorization=SigningCredential()),
    )
    headers = command.request_header()
    assert headers["X-Signed"] == "false"
    assert headers["Authorization"] == "Signature signed"


def test_http_command_request_header_injected_authorization_kept() -> None:
    command = HttpCommand(
        "GET",
        TEST_URL,
        header={"Authorization": "Basic abc"},
        options=RequestOptions(authorization="secret"),
    )
    assert command.request_header().get_list("Authorization") == ["Bearer secret"]


def test_http_command_request_header_explicit_authorization() -> None:
    command = HttpCommand("GET", TEST_URL, header={"Authorization": "Basic abc"})
    assert command.request_header()["Authorization"] == "Basic abc"


def test_http_command_request_header_does_not_modify_command() -> None:
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(authorization="secret"))
    command.request_header()
    assert "Authorization" not in command.header


##############################
#     Tests for the body     #
##############################


def test_http_command_execute_rewinds_stream_body(mock_sleep: Mock) -> None:
    body = io.BytesIO(b"payload")
    client = create_mock_client([create_response(500), create_response(500), create_response(200)])
    HttpCommand("PUT", TEST_URL, body=body, options=RequestOptions(retries=2)).execute(client)
    contents = [call.kwargs["content"] for call in client.request.call_args_list]
    assert contents == [b"payload", b"payload", b"payload"]


def test_http_command_execute_buffers_non_seekable_body(mock_sleep: Mock) -> None:
    body = ReadOnlyStream(b"payload")
    client = create_mock_client([create_response(500), create_response(200)])
    command = HttpCommand("POST", TEST_URL, body=body, options=RequestOptions(retries=1))
    command.execute(client)
    contents = [call.kwargs["content"] for call in client.request.call_args_list]
    assert contents == [b"payload", b"payload"]
    assert command.body == b"payload"
    assert body.reads == 1


def test_http_command_prepare_buffers_unseekable_stream() -> None:
    body = ReadOnlyStream(b"data", seekable=False)
    command = HttpCommand("PUT", TEST_URL, body=body)
    command.prepare()
    assert command.prepared
    assert command.body == b"data"


def test_http_command_prepare_keeps_seekable_stream() -> None:
    body = io.BytesIO(b"data")
    command = HttpCommand("PUT", TEST_URL, body=body)
    command.prepare()
    assert command.body is body


def test_http_command_execute_str_body() -> None:
    client = create_mock_client([create_response(200)])
    HttpCommand("PATCH", TEST_URL, body='{"name": "x"}').execute(client)
    assert client.request.call_args.kwargs["content"] == '{"name": "x"}'


#############################################
#     Tests for the completion callback     #
#############################################


def test_http_command_execute_callback_success() -> None:
    client = create_mock_client([create_response(200, content=b"ok")])
    callback = Mock()
    assert HttpCommand("GET", TEST_URL).execute(client, callback) == b"ok"
    callback.assert_called_once_with(b"ok", None)


def test_http_command_execute_callback_error(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(404)])
    callback = Mock()
    assert HttpCommand("GET", TEST_URL).execute(client, callback) is None
    callback.assert_called_once()
    result, error = callback.call_args.args
    assert result is None
    assert isinstance(error, ClientError)


def test_http_command_execute_callback_configuration_error() -> None:
    client = create_mock_client([create_response(200)])
    callback = Mock()
    HttpCommand("GET", "https://api.example.com/{missing}").execute(client, callback)
    assert isinstance(callback.call_args.args[1], ConfigurationError)


def test_http_command_execute_callback_called_once_after_retries(mock_sleep: Mock) -> None:
    client = create_mock_client([create_response(500), create_response(200, content=b"ok")])
    callback = Mock()
    HttpCommand("GET", TEST_URL, options=RequestOptions(retries=1)).execute(client, callback)
    callback.assert_called_once_with(b"ok", None)


###################################
#     Tests for command hooks     #
###################################


def test_http_command_execute_release_on_success() -> None:
    hooks = TrackingHooks()
    HttpCommand("GET", TEST_URL, hooks=hooks).execute(create_mock_client([create_response(200)]))
    assert hooks.released == 1


def test_http_command_execute_release_on_error() -> None:
    hooks = TrackingHooks()
    with pytest.raises(ClientError):
        HttpCommand("GET", TEST_URL, hooks=hooks).execute(
            create_mock_client([create_response(400)])
        )
    assert hooks.released == 1


def test_http_command_execute_release_with_callback() -> None:
    hooks = TrackingHooks()
    HttpCommand("GET", TEST_URL, hooks=hooks).execute(
        create_mock_client([create_response(400)]), Mock()
    )
    assert hooks.released == 1


def test_http_command_execute_decode_response_body() -> None:
    client = create_mock_client(
        [create_response(200, content=b'{"id": 1}', headers={"Content-Type": "application/json"})]
    )
    assert HttpCommand("GET", TEST_URL, hooks=JsonHooks()).execute(client) == {"id": 1}


def test_http_command_execute_custom_refresh_hook(mock_sleep: Mock) -> None:
    class RefreshHooks(CommandHooks):
        def __init__(self) -> None:
            self.refreshed = 0

        def refresh_authorization(self, command: HttpCommand) -> None:
            self.refreshed += 1

    hooks = RefreshHooks()
    client = create_mock_client([create_response(401), create_response(200)])
    command = HttpCommand(
        "GET", TEST_URL, options=RequestOptions(authorization=RecordingCredential()), hooks=hooks
    )
    command.execute(client)
    assert hooks.refreshed == 1


#############################################
#     Tests for observability callbacks     #
#############################################


def test_http_command_execute_observability_callbacks(mock_sleep: Mock) -> None:
    on_request = Mock()
    on_retry = Mock()
    on_success = Mock()
    on_failure = Mock()
    options = RequestOptions(
        retries=2,
        on_request=on_request,
        on_retry=on_retry,
        on_success=on_success,
        on_failure=on_failure,
    )
    client = create_mock_client([create_response(503), create_response(200, content=b"ok")])
    HttpCommand("GET", TEST_URL, options=options).execute(client)

    assert [call.args[0].attempt for call in on_request.call_args_list] == [1, 2]
    on_retry.assert_called_once()
    retry_info = on_retry.call_args.args[0]
    assert retry_info.attempt == 2
    assert retry_info.max_attempts == 3
    assert retry_info.wait_time == 1.0
    assert retry_info.status_code == 503
    assert isinstance(retry_info.error, ServerError)
    on_success.assert_called_once()
    assert on_success.call_args.args[0].result == b"ok"
    on_failure.assert_not_called()


def test_http_command_execute_on_failure(mock_sleep: Mock) -> None:
    on_success = Mock()
    on_failure = Mock()
    options = RequestOptions(on_success=on_success, on_failure=on_failure)
    client = create_mock_client([create_response(404)])
    with pytest.raises(ClientError):
        HttpCommand("GET", TEST_URL, options=options).execute(client)
    on_success.assert_not_called()
    failure_info = on_failure.call_args.args[0]
    assert failure_info.status_code == 404
    assert failure_info.url == TEST_URL
    assert failure_info.method == "GET"


##################################
#     Tests for execute_once     #
##################################


def test_http_command_execute_once() -> None:
    command = HttpCommand("GET", TEST_URL)
    command.prepare()
    assert command.execute_once(create_mock_client([create_response(200, content=b"x")])) == b"x"


def test_http_command_execute_once_does_not_retry(mock_sleep: Mock) -> None:
    command = HttpCommand("GET", TEST_URL, options=RequestOptions(retries=3))
    command.prepare()
    client = create_mock_client([create_response(500), create_response(200)])
    with pytest.raises(ServerError):
        command.execute_once(client)
    client.request.assert_called_once()


def test_http_command_process_response() -> None:
    command = HttpCommand("GET", TEST_URL)
    assert command.process_response(204, httpx.Headers(), b"") == b""
    with pytest.raises(ServerError) as exc_info:
        command.process_response(500, httpx.Headers({"X-Id": "1"}), b"oops")
    assert exc_info.value.body == b"oops"
