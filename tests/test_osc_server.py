"""
OSC bridge tests.

Handlers are called directly with a MagicMock standing in for the UDP
client, so no sockets are opened.
"""
import json
import pytest
from unittest.mock import MagicMock

from sample_lookup.errors import ErrorCode
from sample_lookup.server.config import OSCAddresses, ServerConfig
from sample_lookup.server.osc_server import SampleLookupOSCServer


@pytest.fixture
def server(violin_catalog, cache, tmp_path):
    config = ServerConfig(
        catalog_path=str(violin_catalog),
        root_config_path=str(tmp_path / "root.txt"),
    )
    srv = SampleLookupOSCServer(config, cache=cache)
    srv._client = MagicMock()
    return srv


def sent(server, address):
    """Arguments of every message sent to ``address``."""
    return [
        call.args[1]
        for call in server._client.send_message.call_args_list
        if call.args[0] == address
    ]


def last_error(server):
    errors = sent(server, OSCAddresses.ERROR)
    assert errors, "no /error message was sent"
    return json.loads(errors[-1][0])


class TestConstruction:

    def test_requires_catalog(self):
        with pytest.raises(ValueError):
            SampleLookupOSCServer(ServerConfig())

    def test_handlers_are_registered(self, server):
        for address in (
            OSCAddresses.ROOT,
            OSCAddresses.INSTRUMENT,
            OSCAddresses.TECHNIQUE,
            OSCAddresses.NOTE,
            OSCAddresses.RELOAD,
            OSCAddresses.LIST_TECH_DYN,
            OSCAddresses.PING,
            OSCAddresses.SHUTDOWN,
        ):
            assert list(server._dispatcher.handlers_for_address(address))

    def test_root_is_restored_from_sidecar(self, violin_catalog, cache, tmp_path):
        (tmp_path / "root.txt").write_text("/saved\n", encoding="utf-8")
        config = ServerConfig(catalog_path=str(violin_catalog), root_config_path=str(tmp_path / "root.txt"))
        assert SampleLookupOSCServer(config, cache=cache).lookup.root_path == "/saved"


class TestNote:
    """The end-to-end scenario driven over OSC."""

    def select(self, server):
        server._handle_root(OSCAddresses.ROOT, "/samples")
        server._handle_instrument(OSCAddresses.INSTRUMENT, "Violin")
        server._handle_technique(OSCAddresses.TECHNIQUE, "pizzicato")

    def test_note_with_dynamic(self, server):
        self.select(server)
        server._handle_note(OSCAddresses.NOTE, "A4", "mf")
        assert sent(server, OSCAddresses.SAMPLES) == [["/samples/Violin/pizz/A4_mf.wav"]]

    def test_note_without_dynamic(self, server):
        self.select(server)
        server._handle_note(OSCAddresses.NOTE, "A4")
        assert sent(server, OSCAddresses.SAMPLES) == [["/samples/Violin/pizz/A4_mf.wav"]]

    def test_no_match_sends_error_only(self, server):
        self.select(server)
        server._handle_note(OSCAddresses.NOTE, "A4", "ff")

        assert sent(server, OSCAddresses.SAMPLES) == []
        error = last_error(server)
        assert error["code"] == ErrorCode.NO_MATCH
        assert error["recoverable"] is True

    def test_incomplete_selection(self, server):
        server._handle_note(OSCAddresses.NOTE, "A4")
        assert last_error(server)["code"] == ErrorCode.INCOMPLETE_SELECTION

    def test_missing_pitch(self, server):
        server._handle_note(OSCAddresses.NOTE)
        assert last_error(server)["code"] == ErrorCode.MISSING_PARAMETER

    def test_on_samples_callback(self, server):
        received = []
        server.on_samples = received.append
        self.select(server)
        server._handle_note(OSCAddresses.NOTE, "A4")
        assert received == [["/samples/Violin/pizz/A4_mf.wav"]]

    def test_split_symbol_is_rejoined(self, write_catalog, cache, tmp_path):
        path = write_catalog(["Alto Flute,flatterzunge,C4,p,flute.wav"], name="flute.csv")
        srv = SampleLookupOSCServer(
            ServerConfig(catalog_path=str(path), root_config_path=str(tmp_path / "r.txt")),
            cache=cache,
        )
        srv._client = MagicMock()
        srv._handle_instrument(OSCAddresses.INSTRUMENT, "Alto", "Flute")
        srv._handle_technique(OSCAddresses.TECHNIQUE, "flatterzunge")
        srv._handle_note(OSCAddresses.NOTE, "C4")
        assert sent(srv, OSCAddresses.SAMPLES) == [["flute.wav"]]


class TestRoot:

    def test_root_is_persisted(self, server, tmp_path):
        server._handle_root(OSCAddresses.ROOT, "/samples")
        assert (tmp_path / "root.txt").read_text(encoding="utf-8") == "/samples\n"
        status = json.loads(sent(server, OSCAddresses.STATUS)[-1][0])
        assert status == {"status": "root_set", "root": "/samples"}

    def test_persist_failure_is_reported(self, violin_catalog, cache, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        srv = SampleLookupOSCServer(
            ServerConfig(catalog_path=str(violin_catalog), root_config_path=str(blocker / "root.txt")),
            cache=cache,
        )
        srv._client = MagicMock()

        srv._handle_root(OSCAddresses.ROOT, "/samples")

        assert last_error(srv)["code"] == ErrorCode.PERSIST_FAILED
        assert srv.lookup.root_path == "/samples"


class TestReloadAndDescribe:

    def test_reload_reports_record_count(self, server, counting_loader):
        server.lookup.load()
        server._handle_reload(OSCAddresses.RELOAD)

        status = json.loads(sent(server, OSCAddresses.STATUS)[-1][0])
        assert status == {"status": "reloaded", "records": 1}
        assert counting_loader.calls == 2

    def test_reload_failure_is_reported(self, tmp_path, cache):
        config = ServerConfig(catalog_path=str(tmp_path / "missing.csv"), root_config_path=str(tmp_path / "r.txt"))
        srv = SampleLookupOSCServer(config, cache=cache)
        srv._client = MagicMock()

        srv._handle_reload(OSCAddresses.RELOAD)

        assert last_error(srv)["code"] == ErrorCode.SOURCE_NOT_FOUND

    def test_list_tech_dyn(self, server):
        server._handle_list_tech_dyn(OSCAddresses.LIST_TECH_DYN, "Violin")
        data = json.loads(sent(server, OSCAddresses.TECH_DYN)[-1][0])
        assert data["techniques"] == ["pizzicato"]
        assert data["dynamics"] == ["mf"]
        assert data["pitches"] == ["A4"]

    def test_list_tech_dyn_unknown_instrument(self, server):
        server._handle_list_tech_dyn(OSCAddresses.LIST_TECH_DYN, "Oboe")
        assert last_error(server)["code"] == ErrorCode.UNKNOWN_INSTRUMENT
        assert sent(server, OSCAddresses.TECH_DYN) == []


class TestHealth:

    def test_ping(self, server):
        server.lookup.load()
        server._handle_ping(OSCAddresses.PING)
        pong = json.loads(sent(server, OSCAddresses.PONG)[-1][0])
        assert pong["status"] == "ok"
        assert pong["records"] == 1

    def test_on_error_callback(self, server):
        errors = []
        server.on_error = lambda code, message: errors.append(code)
        server._handle_note(OSCAddresses.NOTE, "A4")
        assert errors == [ErrorCode.INCOMPLETE_SELECTION]

    def test_stop_when_not_running_is_noop(self, server):
        server.stop()
        assert not server.is_running()


class TestMalformedMessages:

    def test_unknown_address(self, server):
        server._handle_unknown("/bogus", 1)
        error = last_error(server)
        assert error["code"] == ErrorCode.INVALID_MESSAGE
        assert "/bogus" in error["message"]
        assert error["recoverable"] is True

    def test_note_with_extra_arguments(self, server):
        server._handle_instrument(OSCAddresses.INSTRUMENT, "Violin")
        server._handle_technique(OSCAddresses.TECHNIQUE, "pizzicato")
        server._handle_note(OSCAddresses.NOTE, "A4", "mf", "extra")

        assert last_error(server)["code"] == ErrorCode.INVALID_MESSAGE
        assert sent(server, OSCAddresses.SAMPLES) == []

    def test_non_utf8_catalog_is_reported(self, latin1_catalog, cache, tmp_path):
        config = ServerConfig(catalog_path=str(latin1_catalog), root_config_path=str(tmp_path / "r.txt"))
        srv = SampleLookupOSCServer(config, cache=cache)
        srv._client = MagicMock()
        srv._handle_instrument(OSCAddresses.INSTRUMENT, "Violin")
        srv._handle_technique(OSCAddresses.TECHNIQUE, "pizzicato")

        srv._handle_note(OSCAddresses.NOTE, "A4")
        error = last_error(srv)
        assert error["code"] == ErrorCode.INVALID_ENCODING
        assert "line 3" in error["message"]

        srv._handle_reload(OSCAddresses.RELOAD)
        assert last_error(srv)["code"] == ErrorCode.INVALID_ENCODING
        assert sent(srv, OSCAddresses.SAMPLES) == []


class TestShutdown:

    def test_shutdown_reports_status(self, server):
        server._handle_shutdown(OSCAddresses.SHUTDOWN)
        status = json.loads(sent(server, OSCAddresses.STATUS)[-1][0])
        assert status == {"status": "shutdown_started"}

    def test_commands_after_shutdown_are_rejected(self, server):
        server._handle_shutdown(OSCAddresses.SHUTDOWN)
        server._handle_instrument(OSCAddresses.INSTRUMENT, "Violin")
        server._handle_note(OSCAddresses.NOTE, "A4")

        error = last_error(server)
        assert error["code"] == ErrorCode.SHUTDOWN_IN_PROGRESS
        assert error["recoverable"] is False
        assert server.lookup.selected_instrument is None
        assert sent(server, OSCAddresses.SAMPLES) == []

    def test_ping_reports_shutting_down(self, server):
        server._handle_shutdown(OSCAddresses.SHUTDOWN)
        server._handle_ping(OSCAddresses.PING)
        assert json.loads(sent(server, OSCAddresses.PONG)[-1][0])["status"] == "shutting_down"
