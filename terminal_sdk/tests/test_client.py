import unittest
from unittest import mock

import requests

from terminal_sdk.core_api.client import CoreApiClient
from terminal_sdk.core_api.endpoints import EndpointCatalog, EndpointTemplate
from terminal_sdk.core_api.errors import ArityMismatch, CoreRequestError, UnknownEndpoint


def make_response(status_code=200, json_data=None, text=None, headers=None):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.headers = headers or {}
    if json_data is not None:
        response.json.return_value = json_data
        response.text = text if text is not None else "json"
    else:
        response.json.side_effect = ValueError("No JSON")
        response.text = text or ""
    response.content = response.text.encode()
    return response


class CoreApiClientTests(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.client = CoreApiClient(
            base_url="https://core.example.com/",
            session=self.session,
            verify_ssl=True,
            timeout=(3, 9),
        )

    def test_url_for_joins_base_url_and_formatted_path(self):
        self.assertEqual(
            self.client.url_for("UserPermsNodeAssetsList", "u1", "n1"),
            "https://core.example.com/api/v1/perms/users/u1/nodes/n1/assets/",
        )

    def test_get_returns_parsed_json(self):
        self.session.request.return_value = make_response(json_data={"id": "s-1"})

        data = self.client.get("SessionDetail", "s-1")

        self.assertEqual(data, {"id": "s-1"})
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "https://core.example.com/api/v1/terminal/sessions/s-1/"))
        self.assertEqual(kwargs["timeout"], (3, 9))
        self.assertEqual(kwargs["headers"]["Accept"], "application/json")

    def test_post_sends_json_body_and_params(self):
        self.session.request.return_value = make_response(status_code=201, json_data={"ok": True})

        self.client.post("SessionCommand", json=[{"input": "ls"}], params={"bulk": 1})

        args, kwargs = self.session.request.call_args
        self.assertEqual(args[0], "POST")
        self.assertEqual(kwargs["json"], [{"input": "ls"}])
        self.assertEqual(kwargs["params"], {"bulk": 1})

    def test_empty_response_returns_empty_dict(self):
        self.session.request.return_value = make_response(status_code=204)
        self.assertEqual(self.client.patch("ShareSessionFinish", "r-1"), {})

    def test_non_json_body_is_returned_raw(self):
        self.session.request.return_value = make_response(
            text="<html>ok</html>", headers={"Content-Type": "text/html"}
        )
        data = self.client.get("PublicSetting")
        self.assertEqual(data["_raw_response"], "<html>ok</html>")
        self.assertEqual(data["_content_type"], "text/html")

    def test_http_error_raises_core_request_error(self):
        self.session.request.return_value = make_response(
            status_code=404, json_data={"detail": "Not found"}, text='{"detail": "Not found"}'
        )
        with self.assertRaises(CoreRequestError) as ctx:
            self.client.get("AssetDetail", "a-1")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.endpoint_id, "AssetDetail")
        self.assertIn("Not found", ctx.exception.response_body)

    def test_transport_error_raises_core_request_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(CoreRequestError) as ctx:
            self.client.post("TerminalHeartBeat", json={})
        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.ConnectionError)

    def test_catalog_errors_raised_before_any_request(self):
        with self.assertRaises(ArityMismatch):
            self.client.get("SessionReplay")
        with self.assertRaises(UnknownEndpoint):
            self.client.get("DoesNotExist")
        self.session.request.assert_not_called()

    def test_injected_catalog_is_used(self):
        catalog = EndpointCatalog([EndpointTemplate("Ping", "/ping/{0}/", params=("id",))])
        client = CoreApiClient(base_url="http://core", catalog=catalog, session=self.session)
        self.assertEqual(client.url_for("Ping", 5), "http://core/ping/5/")
        with self.assertRaises(UnknownEndpoint):
            client.url_for("SessionList")

    def test_empty_injected_catalog_is_kept(self):
        client = CoreApiClient(
            base_url="http://core", catalog=EndpointCatalog([]), session=self.session, verify_ssl=True
        )
        self.assertEqual(len(client.catalog), 0)
        with self.assertRaises(UnknownEndpoint):
            client.url_for("SessionList")
        with self.assertRaises(UnknownEndpoint):
            client.get("SessionList")
        self.session.request.assert_not_called()

    def test_caller_headers_are_not_mutated(self):
        self.session.request.return_value = make_response(json_data={"ok": True})
        headers = {"X-Trace": "1"}

        self.client.get("SessionList", headers=headers)

        self.assertEqual(headers, {"X-Trace": "1"})
        sent = self.session.request.call_args[1]["headers"]
        self.assertEqual(sent, {"X-Trace": "1", "Accept": "application/json"})

    def test_context_manager_closes_session(self):
        with CoreApiClient(base_url="http://core", session=self.session, verify_ssl=True):
            pass
        self.session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
