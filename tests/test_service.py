"""Tests for configuration and runtime wiring."""

import json

import pytest

from usage_analytics.config import AnalyticsConfig
from usage_analytics.profiling import PerformanceTimeline
from usage_analytics.service import AnalyticsRuntime, create_context, create_sink
from usage_analytics.telemetry.sinks.console import ConsoleSink
from usage_analytics.telemetry.sinks.file import FileSink
from usage_analytics.transport import EmitterTransport, NullTransport


class TestConfig:
    def test_defaults(self):
        config = AnalyticsConfig()

        assert config.telemetry.enabled
        assert config.telemetry.sink_type == "console"
        assert not config.profiling.enabled

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "analytics.yaml"
        path.write_text(
            "telemetry:\n"
            "  sink_type: file\n"
            "  sink_config:\n"
            "    path: events.jsonl\n"
            "  batch_size: 50\n"
            "profiling:\n"
            "  enabled: true\n"
        )

        config = AnalyticsConfig.from_yaml(str(path))

        assert config.telemetry.sink_type == "file"
        assert config.telemetry.sink_config == {"path": "events.jsonl"}
        assert config.telemetry.batch_size == 50
        assert config.profiling.enabled

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert AnalyticsConfig.from_yaml(str(path)) == AnalyticsConfig()

    def test_from_json(self, tmp_path):
        path = tmp_path / "analytics.json"
        path.write_text(json.dumps({"telemetry": {"enabled": False}}))

        assert not AnalyticsConfig.from_json(str(path)).telemetry.enabled


class TestWiring:
    def test_create_sink(self, tmp_path):
        config = AnalyticsConfig.from_dict({
            "telemetry": {"sink_type": "file", "sink_config": {"path": str(tmp_path / "a.jsonl")}},
        })
        assert isinstance(create_sink(config), FileSink)

        config.telemetry.sink_type = "carrier-pigeon"
        assert isinstance(create_sink(config), ConsoleSink)

    def test_context_without_runtime_is_noop(self):
        context = create_context(AnalyticsConfig())

        assert isinstance(context.transport, NullTransport)
        assert not context.is_track_supported()
        assert context.profiler is None

    def test_disabled_telemetry_is_noop(self):
        config = AnalyticsConfig.from_dict({"telemetry": {"enabled": False}})
        runtime = AnalyticsRuntime.from_config(config)

        assert isinstance(create_context(config, runtime).transport, NullTransport)

    def test_profiling_enabled(self):
        config = AnalyticsConfig.from_dict({"profiling": {"enabled": True, "max_entries": 5}})

        profiler = create_context(config).profiler
        assert isinstance(profiler, PerformanceTimeline)
        assert profiler.max_entries == 5

    @pytest.mark.asyncio
    async def test_end_to_end_file_delivery(self, tmp_path):
        path = tmp_path / "analytics.jsonl"
        config = AnalyticsConfig.from_dict({
            "telemetry": {
                "sink_type": "file",
                "sink_config": {"path": str(path)},
                "batch_size": 100,
                "flush_interval_seconds": 60.0,
            },
        })
        runtime = AnalyticsRuntime.from_config(config)
        await runtime.start()

        context = create_context(config, runtime)
        assert isinstance(context.transport, EmitterTransport)

        context.track("opened", {"file": "a.py"})
        assert context.track_timing("parse", lambda: "tree") == "tree"
        await context.track_immediate("flushed-now")

        await runtime.stop()

        records = [json.loads(line) for line in path.read_text().splitlines()]
        names = [r["name"] for r in records]
        assert names[0] == "flushed-now"
        assert sorted(names[1:]) == ["opened", "performance"]
        assert runtime.stats["batcher"]["events_sent"] == 2
