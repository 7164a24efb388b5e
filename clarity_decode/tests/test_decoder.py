"""End-to-end tests for decoding raw uploads."""

from __future__ import annotations

import json
import logging
import time

import pytest

import clarity_decode
from clarity_decode.core.decoder import Decoder
from clarity_decode.decoders.data import BaselineData
from clarity_decode.protocol import BooleanFlag, Event, Metric, Upload
from clarity_decode.version import VERSION, VersionMismatch
from clarity_decode.wire import PayloadError


def _raw(a, p=None, *, version=VERSION, sequence=1) -> str:
    doc = {"e": [version, sequence, 1000, 2500, "proj", "user", "sess", 3, 1, 1], "a": a}
    if p is not None:
        doc["p"] = p
    return json.dumps(doc)


class TestEnvelope:
    def test_fields(self):
        payload = Decoder().decode(_raw([]))
        env = payload.envelope
        assert env.version == VERSION
        assert env.sequence == 1
        assert env.start == 1000
        assert env.duration == 2500
        assert env.project_id == "proj"
        assert env.user_id == "user"
        assert env.session_id == "sess"
        assert env.page_num == 3
        assert env.upload is Upload.BEACON
        assert env.end is BooleanFlag.TRUE

    def test_envelope_is_immutable(self):
        payload = Decoder().decode(_raw([]))
        with pytest.raises(AttributeError):
            payload.envelope.sequence = 9  # type: ignore[misc]

    def test_timestamp_is_decode_time(self):
        before = int(time.time() * 1000)
        payload = Decoder().decode(_raw([]))
        after = int(time.time() * 1000)
        assert before <= payload.timestamp <= after


class TestBuckets:
    def test_absent_buckets_are_absent(self):
        payload = Decoder().decode(_raw([[10, Event.CLICK, 1, 2, 3]]))
        assert payload.buckets == ["click"]
        assert payload.get("scroll") is None
        assert "scroll" not in payload
        assert "scroll" not in payload.to_dict()

    def test_empty_upload_has_no_buckets(self):
        payload = Decoder().decode(_raw([]))
        assert payload.events == {}
        assert set(payload.to_dict()) == {"timestamp", "envelope"}

    def test_events_in_chronological_order_across_channels(self):
        a = [[30, Event.CLICK, 1, 0, 0], [10, Event.MOUSE_MOVE, 1, 5, 5]]
        p = [[20, Event.SCROLL, 1, 0, 100], [10, Event.SCROLL, 1, 0, 50]]
        payload = Decoder().decode(_raw(a, p))
        assert [e.time for e in payload.get("scroll")] == [10, 20]
        assert payload.buckets == ["pointer", "scroll", "click"]

    def test_baseline_decoded(self):
        payload = Decoder().decode(_raw([[5, Event.BASELINE, 1, 1024, 4000, 1920, 1080]]))
        data = payload.get("baseline")[0].data
        assert isinstance(data, BaselineData)
        assert data.doc_height == 4000
        assert data.scroll_x is None

    def test_unknown_event_does_not_raise(self, caplog):
        with caplog.at_level(logging.ERROR):
            payload = Decoder().decode(_raw([[5, 250, "?"], [6, Event.PAGE, 1]]))
        assert payload.events == {}
        assert any("no handler for event" in r.getMessage() for r in caplog.records)

    def test_degenerate_tokens_do_not_crash(self):
        a = [
            [1, Event.CLICK],
            [2, Event.METRIC, 2],
            [3, Event.DISCOVER],
            [4, Event.LOG, "not-a-code"],
            [5, Event.NAVIGATION, 1],
        ]
        payload = Decoder().decode(_raw(a))
        assert payload.get("click")[0].data.target is None
        assert payload.get("dom")[0].data == []
        assert payload.get("navigation")[0].data.fetch_start == 1

    def test_integral_float_code(self):
        payload = Decoder().decode(_raw([[1, 10.0, 7, 1, 2]]))
        (click,) = payload.get("click")
        assert click.event == Event.CLICK
        assert type(click.event) is int


class TestMetricBytes:
    def test_all_metrics_carry_raw_length(self):
        raw = _raw(
            [[10, Event.METRIC, Metric.TOTAL_BYTES, 111, Metric.LAYOUT_COST, 4]],
            [[20, Event.METRIC, Metric.TOTAL_BYTES, 222]],
        )
        payload = Decoder().decode(raw)
        metrics = payload.get("metric")
        assert len(metrics) == 2
        assert [m.data[Metric.TOTAL_BYTES] for m in metrics] == [len(raw), len(raw)]
        assert metrics[0].data[Metric.LAYOUT_COST] == 4

    def test_length_counts_utf16_code_units(self):
        doc = {
            "e": [VERSION, 1, 0, 0, "proj", "user", "sess", 1, 0, 0],
            "a": [
                [10, Event.METRIC, Metric.TOTAL_BYTES, 0],
                [11, Event.CUSTOM, "k", "\U0001f600\U0001f680"],
            ],
        }
        raw = json.dumps(doc, ensure_ascii=False)
        payload = Decoder().decode(raw)
        assert payload.get("metric")[0].data[Metric.TOTAL_BYTES] == len(raw) + 2
        payload = Decoder().decode(raw.encode("utf-8"))
        assert payload.get("metric")[0].data[Metric.TOTAL_BYTES] == len(raw) + 2

    def test_bytes_input_measured_after_utf8_decode(self):
        doc = {
            "e": [VERSION, 1, 0, 0, "proj", "user", "sess", 1, 0, 0],
            "a": [[10, Event.METRIC, Metric.TOTAL_BYTES, 0], [11, Event.CUSTOM, "k", "héllo"]],
        }
        raw = json.dumps(doc, ensure_ascii=False)
        encoded = raw.encode("utf-8")
        assert len(encoded) > len(raw)
        payload = Decoder().decode(encoded)
        assert payload.get("metric")[0].data[Metric.TOTAL_BYTES] == len(raw)
        assert payload.get("custom")[0].data.value == "héllo"


class TestFailures:
    def test_version_mismatch_raises_before_dispatch(self, monkeypatch):
        decoder = Decoder("1.2.0")
        calls = []
        monkeypatch.setattr(decoder._dispatcher, "dispatch", lambda *a: calls.append(a))
        monkeypatch.setattr(decoder.layout, "reset", lambda: calls.append("reset"))
        with pytest.raises(VersionMismatch) as exc:
            decoder.decode(_raw([[1, Event.CLICK, 1, 2, 3]], version="1.3.0"))
        assert calls == []
        assert exc.value.actual == "1.3.0"
        assert exc.value.expected == "1.2.0"

    def test_patch_within_one_accepted(self):
        payload = Decoder("1.2.0").decode(_raw([[1, Event.PING, 5]], version="1.2.1-b4"))
        assert payload.get("ping")[0].data.gap == 5

    def test_malformed_json(self):
        with pytest.raises(PayloadError):
            Decoder().decode("{not json")

    def test_wrong_shape(self):
        with pytest.raises(PayloadError):
            Decoder().decode(json.dumps({"e": [VERSION]}))
        with pytest.raises(PayloadError):
            Decoder().decode(json.dumps({"e": [VERSION], "a": {"0": [1, Event.PING]}}))

    def test_token_without_timestamp_is_skipped(self, caplog):
        with caplog.at_level(logging.ERROR):
            payload = Decoder().decode(_raw([[], ["late", 1], 7, [2, Event.PING, 5]]))
        assert payload.buckets == ["ping"]
        assert payload.get("ping")[0].data.gap == 5
        messages = [r.getMessage() for r in caplog.records]
        assert "no handler for event: []" in messages
        assert 'no handler for event: ["late", 1]' in messages
        assert "no handler for event: 7" in messages

    def test_leading_dom_strings_do_not_raise(self):
        payload = Decoder().decode(_raw([[1, Event.DISCOVER, "HTML", 1, "BODY"]]))
        (node,) = payload.get("dom")[0].data
        assert node.tag == "BODY"

    def test_payload_error_is_value_error(self):
        with pytest.raises(ValueError):
            Decoder().decode("[]")


class TestStatelessAcrossCalls:
    def test_no_bucket_leak_between_calls(self):
        decoder = Decoder()
        first = decoder.decode(_raw([[1, Event.CLICK, 1, 0, 0]]))
        second = decoder.decode(_raw([[2, Event.SCROLL, 1, 0, 0]], sequence=2))
        assert first.buckets == ["click"]
        assert second.buckets == ["scroll"]
        assert first.events is not second.events

    def test_layout_reset_once_per_decode(self, monkeypatch):
        decoder = Decoder()
        resets = []
        original = decoder.layout.reset
        monkeypatch.setattr(decoder.layout, "reset", lambda: (resets.append(1), original()))
        decoder.decode(_raw([[1, Event.DISCOVER, 1, "HTML"], [2, Event.MUTATION, 1, "HTML"]]))
        assert resets == [1]

    def test_layout_state_does_not_leak(self):
        decoder = Decoder()
        decoder.decode(_raw([[1, Event.DISCOVER, 1, "HTML", 2, 1, "BODY"]]))
        payload = decoder.decode(_raw([[5, Event.MUTATION, 2, "BODY", "class=x"]], sequence=2))
        node = payload.get("dom")[0].data[0]
        assert node.id == 2
        assert node.parent is None


class TestModuleDecode:
    def test_default_decoder(self):
        payload = clarity_decode.decode(_raw([[1, Event.RESIZE, 800, 600]]))
        assert payload.get("resize")[0].data.width == 800

    def test_to_line_round_trips_through_json(self):
        payload = clarity_decode.decode(
            _raw([[1, Event.METRIC, 2, 0], [2, Event.DIMENSION, 1, ["https://x"]]])
        )
        d = json.loads(payload.to_line())
        assert d["envelope"]["upload"] == 1
        assert d["metric"][0]["data"]["2"] > 0
        assert d["dimension"][0]["data"] == {"1": ["https://x"]}
