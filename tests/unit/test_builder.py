"""
Tests for ClientBuilder.
"""

import errno
import itertools
from unittest.mock import Mock

import pytest
import requests
import responses
from urllib3.exceptions import ReadTimeoutError

from service_client import ClientBuilder
from service_client.client import ServiceSession
from service_client.exceptions import (
    BadGatewayError,
    ClientBuilderError,
    ForbiddenError,
    GatewayTimeoutError,
    NotFoundError,
    RequestTimeoutError,
    UnauthorizedError,
)

URL = "https://somedomain.com/foo"


def as_dict(error):
    return {"message": error.message, "status_code": error.status_code}


class TestBuilderWithoutHelpers:
    """Client built without any add_* calls."""

    @pytest.fixture
    def client(self):
        client = ClientBuilder(
            service="some-service",
            trace_id="someTraceId",
            agent="someAgent",
            config={},
        ).build()
        yield client
        client.close()

    def test_sets_trace_id_header(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get(URL)

        assert mock_responses.calls[0].request.headers["Trace-Id"] == "someTraceId"

    def test_sets_user_agent_header(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get(URL)

        assert mock_responses.calls[0].request.headers["User-Agent"] == "someAgent"

    def test_no_trace_id_header_when_not_given(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(service="some-service").build()

        client.get(URL)

        assert "Trace-Id" not in mock_responses.calls[0].request.headers

    def test_default_timeout_is_three_seconds(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get(URL)

        assert client.timeout == 3000
        assert mock_responses.calls[0].request.req_kwargs["timeout"] == 3.0

    def test_stalled_body_raises_timeout_error(self, client, mock_responses):
        mock_responses.add(
            responses.GET, URL,
            body=requests.exceptions.ConnectionError(ReadTimeoutError(None, None, "Read timed out.")),
        )

        with pytest.raises(RequestTimeoutError) as exc_info:
            client.get(URL)

        assert str(exc_info.value) == "timeout of 3000ms exceeded"

    def test_times_out_with_default_timeout_message(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout("Read timed out"))

        with pytest.raises(RequestTimeoutError) as exc_info:
            client.get(URL)

        assert str(exc_info.value) == "timeout of 3000ms exceeded"
        assert isinstance(exc_info.value, requests.exceptions.Timeout)

    def test_passes_errors_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        with pytest.raises(requests.exceptions.HTTPError) as exc_info:
            client.get(URL)

        assert exc_info.value.response.status_code == 500

    def test_build_returns_service_session(self, client):
        assert isinstance(client, ServiceSession)


class TestBuilderConfigOverride:
    """Caller config is deep-merged over the defaults."""

    def test_base_url_is_used_for_relative_paths(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(
            service="some-service",
            agent="someAgent",
            config={"base_url": "https://somedomain.com"},
        ).build()

        response = client.get("/foo")

        assert response.status_code == 200

    def test_higher_timeout_overrides_default(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout("Read timed out"))
        client = ClientBuilder(
            service="some-service",
            agent="someAgent",
            config={"timeout": 5000},
        ).build()

        with pytest.raises(RequestTimeoutError) as exc_info:
            client.get(URL)

        assert str(exc_info.value) == "timeout of 5000ms exceeded"
        assert mock_responses.calls[0].request.req_kwargs["timeout"] == 5.0

    def test_config_headers_merge_with_defaults(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(
            service="some-service",
            agent="someAgent",
            trace_id="someTraceId",
            config={"headers": {"Accept": "application/json"}},
        ).build()

        client.get(URL)

        headers = mock_responses.calls[0].request.headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == "someAgent"
        assert headers["Trace-Id"] == "someTraceId"

    def test_config_headers_override_defaults(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(
            service="some-service",
            agent="someAgent",
            config={"headers": {"User-Agent": "overridden"}},
        ).build()

        client.get(URL)

        assert mock_responses.calls[0].request.headers["User-Agent"] == "overridden"


class TestBuilder5xxErrorHandling:
    """add_5xx_error_handling()."""

    @pytest.fixture
    def client(self):
        return ClientBuilder(
            service="some-service",
            agent="someAgent",
            config={},
        ).add_5xx_error_handling().build()

    def test_400_passes_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=400)

        with pytest.raises(requests.exceptions.HTTPError) as exc_info:
            client.get(URL)

        assert str(exc_info.value).startswith("400 Client Error")

    @pytest.mark.parametrize("status", [500, 503])
    def test_5xx_becomes_bad_gateway(self, client, mock_responses, status):
        mock_responses.add(responses.GET, URL, status=status, body="upstream details")

        with pytest.raises(BadGatewayError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Bad Gateway", "status_code": 502}

    def test_original_error_kept_as_cause(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        with pytest.raises(BadGatewayError) as exc_info:
            client.get(URL)

        assert isinstance(exc_info.value.__cause__, requests.exceptions.HTTPError)

    def test_connection_failure_becomes_bad_gateway(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ConnectionError("Connection refused"))

        with pytest.raises(BadGatewayError):
            client.get(URL)

    def test_transport_timeout_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout("Read timed out"))

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Gateway Timeout", "status_code": 504}

    def test_stalled_body_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(
            responses.GET, URL,
            body=requests.exceptions.ConnectionError(ReadTimeoutError(None, None, "Read timed out.")),
        )

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Gateway Timeout", "status_code": 504}
        assert isinstance(exc_info.value.__cause__, RequestTimeoutError)

    def test_etimedout_code_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, body=OSError(errno.ETIMEDOUT, "Connection timed out"))

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Gateway Timeout", "status_code": 504}

    def test_timeout_message_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(
            responses.GET, URL,
            body=requests.exceptions.ConnectionError("timeout of 3000ms exceeded"),
        )

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Gateway Timeout", "status_code": 504}

    def test_success_is_untouched(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, json={"id": 1}, status=200)

        assert client.get(URL).json() == {"id": 1}


class TestBuilder404ErrorHandling:
    """add_404_error_handling()."""

    @pytest.fixture
    def client(self):
        return ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_404_error_handling() \
            .build()

    def test_400_passes_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=400)

        with pytest.raises(requests.exceptions.HTTPError) as exc_info:
            client.get(URL)

        assert str(exc_info.value).startswith("400 Client Error")

    def test_404_becomes_not_found(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=404, body="no such thing")

        with pytest.raises(NotFoundError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Not Found", "status_code": 404}

    def test_500_passes_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        with pytest.raises(requests.exceptions.HTTPError):
            client.get(URL)


class TestBuilderRequestLogging:
    """add_request_logging()."""

    @pytest.fixture
    def client(self, log):
        return ClientBuilder(
            service="some-service",
            agent="someAgent",
            logger=log,
            config={"base_url": "https://somedomain.com"},
        ).add_request_logging().build()

    def test_raises_without_logger(self):
        builder = ClientBuilder(
            service="some-service",
            agent="someAgent",
            config={"base_url": "https://somedomain.com"},
        )

        with pytest.raises(ClientBuilderError, match="ClientBuilderError: No logger configured"):
            builder.add_request_logging()

    def test_logs_the_request(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get("/foo")

        log.info.assert_any_call({
            "event": "some-service-request",
            "host": "https://somedomain.com",
            "method": "GET",
            "path": "/foo",
        })

    def test_logs_the_response(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get("/foo")

        log.info.assert_any_call({
            "event": "some-service-response",
            "host": "https://somedomain.com",
            "method": "GET",
            "path": "/foo",
            "status": 200,
        })

    def test_logs_request_before_response(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)

        client.get("/foo")

        events = [call.args[0]["event"] for call in log.info.call_args_list]
        assert events == ["some-service-request", "some-service-response"]
        log.error.assert_not_called()

    def test_logs_the_error(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=400, body="BadRequest")

        with pytest.raises(requests.exceptions.HTTPError) as exc_info:
            client.get("/foo")

        log.error.assert_called_once_with({
            "event": "some-service-error",
            "status": 400,
            "message": str(exc_info.value),
            "data": "BadRequest",
        })

    def test_error_logs_once_info_once_error(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=400, body="BadRequest")

        with pytest.raises(requests.exceptions.HTTPError):
            client.get("/foo")

        assert log.info.call_count == 1
        assert log.error.call_count == 1

    def test_logs_json_error_body_as_data(self, client, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=422, json={"field": "name"})

        with pytest.raises(requests.exceptions.HTTPError):
            client.get("/foo")

        assert log.error.call_args.args[0]["data"] == {"field": "name"}

    def test_post_method_is_upper_case(self, client, log, mock_responses):
        mock_responses.add(responses.POST, URL, status=201)

        client.post("/foo", json={"name": "x"})

        assert log.info.call_args_list[0].args[0]["method"] == "POST"

    def test_logger_without_request_logging_logs_nothing(self, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(
            service="some-service",
            agent="someAgent",
            logger=log,
            config={"base_url": "https://somedomain.com"},
        ).build()

        client.get("/foo")

        log.info.assert_not_called()

    def test_logs_original_error_before_translation(self, log, mock_responses):
        mock_responses.add(responses.GET, URL, status=500, body="boom")
        client = ClientBuilder(
            service="some-service",
            logger=log,
            config={"base_url": "https://somedomain.com"},
        ).add_request_logging().add_5xx_error_handling().build()

        with pytest.raises(BadGatewayError):
            client.get("/foo")

        logged = log.error.call_args.args[0]
        assert logged["status"] == 500
        assert logged["data"] == "boom"


class TestBuilderAuthErrorHandling:
    """add_auth_error_handling()."""

    @pytest.fixture
    def client(self):
        return ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_auth_error_handling() \
            .build()

    def test_401_uses_serialized_body(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=401, body="Unauthorized User")

        with pytest.raises(UnauthorizedError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": '"Unauthorized User"', "status_code": 401}

    def test_403_uses_serialized_body(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=403, body="Forbidden User")

        with pytest.raises(ForbiddenError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": '"Forbidden User"', "status_code": 403}

    def test_json_body_is_serialized(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=403, json={"reason": "scope"})

        with pytest.raises(ForbiddenError) as exc_info:
            client.get(URL)

        assert exc_info.value.message == '{"reason": "scope"}'

    def test_500_passes_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=500, body="Server Error")

        with pytest.raises(requests.exceptions.HTTPError) as exc_info:
            client.get(URL)

        assert str(exc_info.value).startswith("500 Server Error")


class TestBuilderAuthorization:
    """add_authorization()."""

    def test_static_string_is_added(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_authorization("someStaticAuth") \
            .build()

        client.get(URL)

        assert mock_responses.calls[0].request.headers["Authorization"] == "someStaticAuth"

    def test_explicit_header_is_not_overwritten(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_authorization("someStaticAuth") \
            .build()

        client.get(URL, headers={"Authorization": "someDifferentAuth"})

        assert mock_responses.calls[0].request.headers["Authorization"] == "someDifferentAuth"

    def test_config_header_is_not_overwritten(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(
            service="some-service",
            config={"headers": {"Authorization": "fromConfig"}},
        ).add_authorization("someStaticAuth").build()

        client.get(URL)

        assert mock_responses.calls[0].request.headers["Authorization"] == "fromConfig"

    def test_dynamic_function_is_used(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        client = ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_authorization(lambda: "someDynamicAuth") \
            .build()

        client.get(URL)

        assert mock_responses.calls[0].request.headers["Authorization"] == "someDynamicAuth"

    def test_dynamic_function_skipped_for_explicit_header(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        generator = Mock(return_value="someDynamicAuth")
        client = ClientBuilder(service="some-service").add_authorization(generator).build()

        client.get(URL, headers={"Authorization": "someDifferentAuth"})

        assert mock_responses.calls[0].request.headers["Authorization"] == "someDifferentAuth"
        generator.assert_not_called()

    def test_dynamic_function_is_called_per_request(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        mock_responses.add(responses.GET, URL, status=200)
        counter = itertools.count(1)
        client = ClientBuilder(service="some-service") \
            .add_authorization(lambda: f"Bearer {next(counter)}") \
            .build()

        client.get(URL)
        client.get(URL)

        sent = [call.request.headers["Authorization"] for call in mock_responses.calls]
        assert sent == ["Bearer 1", "Bearer 2"]


class TestBuilderAllErrorHandlers:
    """All error handlers together yield the most specific error."""

    @pytest.fixture
    def client(self):
        return ClientBuilder(service="some-service", agent="someAgent", config={}) \
            .add_authorization(lambda: "someDynamicAuth") \
            .add_404_error_handling() \
            .add_auth_error_handling() \
            .add_5xx_error_handling() \
            .build()

    @pytest.mark.parametrize("status", [500, 503])
    def test_5xx_becomes_bad_gateway(self, client, mock_responses, status):
        mock_responses.add(responses.GET, URL, status=status)

        with pytest.raises(BadGatewayError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Bad Gateway", "status_code": 502}

    def test_etimedout_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, body=OSError(errno.ETIMEDOUT, "Connection timed out"))

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Gateway Timeout", "status_code": 504}

    def test_timeout_message_becomes_gateway_timeout(self, client, mock_responses):
        mock_responses.add(
            responses.GET, URL,
            body=requests.exceptions.ConnectionError("timeout of 3000ms exceeded"),
        )

        with pytest.raises(GatewayTimeoutError):
            client.get(URL)

    def test_404_becomes_not_found(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=404)

        with pytest.raises(NotFoundError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": "Not Found", "status_code": 404}

    def test_401_becomes_unauthorized(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=401, body="Unauthorized User")

        with pytest.raises(UnauthorizedError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": '"Unauthorized User"', "status_code": 401}

    def test_403_becomes_forbidden(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=403, body="Forbidden User")

        with pytest.raises(ForbiddenError) as exc_info:
            client.get(URL)

        assert as_dict(exc_info.value) == {"message": '"Forbidden User"', "status_code": 403}

    def test_400_passes_through(self, client, mock_responses):
        mock_responses.add(responses.GET, URL, status=400)

        with pytest.raises(requests.exceptions.HTTPError):
            client.get(URL)


class TestBuilderChaining:
    """Fluent configuration and build() contract."""

    def test_methods_return_same_builder(self, log):
        builder = ClientBuilder(service="some-service", logger=log)

        assert builder.add_5xx_error_handling() is builder
        assert builder.add_404_error_handling() is builder
        assert builder.add_auth_error_handling() is builder
        assert builder.add_request_logging() is builder
        assert builder.add_authorization("token") is builder

    def test_error_handlers_installed_only_on_build(self):
        builder = ClientBuilder(service="some-service").add_404_error_handling().add_5xx_error_handling()

        assert len(builder.client.interceptors.response) == 0
        client = builder.build()
        assert len(client.interceptors.response) == 2

    def test_build_twice_registers_handlers_twice(self):
        builder = ClientBuilder(service="some-service").add_404_error_handling()

        builder.build()
        client = builder.build()

        assert len(client.interceptors.response) == 2

    def test_accepts_params_mapping(self, mock_responses):
        mock_responses.add(responses.GET, URL, status=200)
        params = {"service": "some-service", "agent": "someAgent", "trace_id": "t-1"}

        client = ClientBuilder(**params).build()
        client.get(URL)

        assert mock_responses.calls[0].request.headers["Trace-Id"] == "t-1"
