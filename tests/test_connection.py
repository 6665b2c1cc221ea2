# tests/test_connection.py
# SPDX-License-Identifier: Apache-2.0
"""Connection probe classification and the debounced setup form."""

from __future__ import annotations

from unittest.mock import Mock

from anoma_explorer.core.connection import ConnectionStatus, ProbeResult, SetupForm, probe, should_probe

URL = "https://indexer.test/v1/graphql"


class TestProbe:
    def test_blank_url_is_not_configured(self):
        tester = Mock()
        result = probe("  ", tester)
        assert result.status is ConnectionStatus.NOT_CONFIGURED
        assert result.ready is False
        tester.assert_not_called()

    def test_ready(self):
        result = probe(URL, Mock(return_value=(True, "Connected successfully")))
        assert result == ProbeResult(ConnectionStatus.READY, "Connected successfully", URL)
        assert result.ready is True

    def test_failure_keeps_message(self):
        tester = Mock(return_value=(False, "HTTP 502"))
        result = probe(URL, tester)
        assert result.status is ConnectionStatus.CONNECTION_ERROR
        assert result.message == "HTTP 502"
        tester.assert_called_once_with(URL)


class TestShouldProbe:
    ready = ProbeResult(ConnectionStatus.READY, "ok", URL)

    def test_nothing_cached(self):
        assert should_probe(None) is True

    def test_failures_are_retried(self):
        assert should_probe(ProbeResult(ConnectionStatus.CONNECTION_ERROR, "x", URL), URL) is True

    def test_same_url_cached(self):
        assert should_probe(self.ready, URL) is False
        assert should_probe(self.ready) is False

    def test_url_changed(self):
        assert should_probe(self.ready, "https://other.test/graphql") is True


class TestSetupForm:
    def test_edit_starts_pending_test(self):
        form = SetupForm()
        form.edit(f" {URL} ", now=10.0)
        assert form.url_input == URL
        assert form.testing is True
        assert form.due_for_auto_test(10.5, debounce=1.5) is False
        assert form.due_for_auto_test(11.5, debounce=1.5) is True

    def test_unchanged_edit_keeps_timer(self):
        form = SetupForm()
        form.edit(URL, now=10.0)
        form.edit(URL, now=20.0)
        assert form.edited_at == 10.0

    def test_blank_input_is_not_tested(self):
        form = SetupForm()
        form.edit("", now=1.0)
        assert form.testing is False
        assert form.due_for_auto_test(100.0) is False

    def test_record_result(self):
        form = SetupForm()
        form.edit(URL, now=0.0)
        assert form.record_test(URL, (True, "Connected successfully")) is True
        assert form.status == (True, "Connected successfully")
        assert form.testing is False
        assert form.due_for_auto_test(100.0) is False

    def test_stale_result_ignored(self):
        form = SetupForm()
        form.edit(URL, now=0.0)
        form.edit("https://typo.test", now=1.0)
        assert form.record_test(URL, (True, "Connected successfully")) is False
        assert form.status is None
        assert form.testing is True

    def test_new_edit_clears_status(self):
        form = SetupForm()
        form.edit(URL, now=0.0)
        form.record_test(URL, (False, "HTTP 404"))
        form.edit(URL + "/x", now=5.0)
        assert form.status is None
