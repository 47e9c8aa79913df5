"""Tests for the extension loader."""

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from botmodules.configurator import ModuleConfiguration
from botmodules.helpers import helpers
from botmodules.loader import ExtensionLoader, is_capability_bundle
from botmodules.registry import ExtensionLoadError, ExtensionRegistry
from botmodules.scanner import CandidateDescriptor


@dataclass
class FakeHost:
    botfile: dict[str, Any] = field(default_factory=dict)
    events: list[str] = field(default_factory=list)


def make_descriptor(tmp_path: Path, name: str, code: str | None = None) -> CandidateDescriptor:
    root = tmp_path / "node_modules" / name
    root.mkdir(parents=True, exist_ok=True)
    entry = root / "index.py"
    if code is not None:
        entry.write_text(code)
    return CandidateDescriptor(name=name, root=root, version="1.0.0", entry=entry)


class TestIsCapabilityBundle:
    def test_accepts_objects(self):
        assert is_capability_bundle({"init": None})
        assert is_capability_bundle(logging)
        assert is_capability_bundle(FakeHost())

    def test_rejects_non_objects(self):
        assert not is_capability_bundle(None)
        assert not is_capability_bundle("module")
        assert not is_capability_bundle(42)
        assert not is_capability_bundle([1, 2])
        assert not is_capability_bundle(lambda: None)
        assert not is_capability_bundle(FakeHost)


class TestExtensionRegistry:
    def test_registered_bundle_wins(self, tmp_path):
        registry = ExtensionRegistry()
        bundle = {"config": {}}
        registry.register("botpress-reg", bundle)
        descriptor = make_descriptor(tmp_path, "botpress-reg")

        assert registry.resolve(descriptor) is bundle
        assert "botpress-reg" in registry
        assert len(registry) == 1

    def test_duplicate_registration_fails(self):
        registry = ExtensionRegistry()
        registry.register("botpress-dup", {})

        with pytest.raises(ValueError):
            registry.register("botpress-dup", {})

    def test_module_extension_attribute_is_the_bundle(self, tmp_path):
        descriptor = make_descriptor(
            tmp_path, "botpress-attr", "extension = {'config': {'greeting': {'type': 'string'}}}\n"
        )

        bundle = ExtensionRegistry().resolve(descriptor)

        assert bundle == {"config": {"greeting": {"type": "string"}}}

    def test_broken_entry_raises_load_error(self, tmp_path):
        descriptor = make_descriptor(tmp_path, "botpress-broken", "raise RuntimeError('boom')\n")

        with pytest.raises(ExtensionLoadError, match="boom"):
            ExtensionRegistry().resolve(descriptor)

    def test_similar_names_get_distinct_modules(self, tmp_path):
        first = make_descriptor(tmp_path, "botpress-a.b", "value = 1\n")
        second = make_descriptor(tmp_path, "botpress-a_b", "value = 2\n")
        registry = ExtensionRegistry()

        first_bundle = registry.resolve(first)
        second_bundle = registry.resolve(second)

        assert first_bundle.__name__ != second_bundle.__name__
        assert sys.modules[first_bundle.__name__] is first_bundle
        assert (first_bundle.value, second_bundle.value) == (1, 2)

    def test_unregister(self):
        registry = ExtensionRegistry()
        registry.register("botpress-gone", {})

        assert registry.unregister("botpress-gone") is True
        assert registry.unregister("botpress-gone") is False


class TestExtensionLoader:
    @pytest.mark.asyncio
    async def test_loads_module_from_entry_file(self, tmp_path):
        code = (
            "config = {'greeting': {'type': 'string', 'default': 'hello'}}\n"
            "\n"
            "def init(bp, configuration, helpers):\n"
            "    bp.events.append('init:' + configuration.get('greeting'))\n"
        )
        descriptor = make_descriptor(tmp_path, "botpress-hello", code)
        host = FakeHost()

        loaded = await ExtensionLoader(tmp_path).load([descriptor], host)

        assert list(loaded) == ["botpress-hello"]
        extension = loaded["botpress-hello"]
        assert extension.name == "botpress-hello"
        assert extension.version == "1.0.0"
        assert isinstance(extension.configuration, ModuleConfiguration)
        assert host.events == ["init:hello"]

    @pytest.mark.asyncio
    async def test_init_receives_host_config_and_helpers(self, tmp_path):
        received = {}

        async def init(bp, configuration, module_helpers):
            received["args"] = (bp, configuration, module_helpers)

        registry = ExtensionRegistry()
        registry.register("botpress-args", {"init": init})
        host = FakeHost()

        loaded = await ExtensionLoader(tmp_path, registry=registry).load(
            [make_descriptor(tmp_path, "botpress-args")], host
        )

        bp, configuration, module_helpers = received["args"]
        assert bp is host
        assert configuration is loaded["botpress-args"].configuration
        assert module_helpers is helpers

    @pytest.mark.asyncio
    async def test_import_failure_skips_only_that_module(self, tmp_path, caplog):
        descriptors = [
            make_descriptor(tmp_path, "botpress-first", "def init(bp, c, h):\n    bp.events.append('first')\n"),
            make_descriptor(tmp_path, "botpress-poison", "raise ImportError('missing dependency')\n"),
            make_descriptor(tmp_path, "botpress-last", "def init(bp, c, h):\n    bp.events.append('last')\n"),
        ]
        host = FakeHost()

        loaded = await ExtensionLoader(tmp_path).load(descriptors, host)

        assert list(loaded) == ["botpress-first", "botpress-last"]
        assert host.events == ["first", "last"]
        assert 'Error loading module "botpress-poison"' in caplog.text
        assert "missing dependency" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_shape_is_ignored(self, tmp_path, caplog):
        registry = ExtensionRegistry()
        registry.register("botpress-func", lambda: None)

        loaded = await ExtensionLoader(tmp_path, registry=registry).load(
            [make_descriptor(tmp_path, "botpress-func")], FakeHost()
        )

        assert loaded == {}
        assert "Ignoring module botpress-func. Invalid entry point signature." in caplog.text

    @pytest.mark.asyncio
    async def test_configuration_failure_still_loads(self, tmp_path, caplog):
        def failing_factory(**kwargs):
            raise ValueError("bad options")

        inits = []
        registry = ExtensionRegistry()
        registry.register("botpress-cfg", {"init": lambda bp, c, h: inits.append(c)})

        loaded = await ExtensionLoader(
            tmp_path, registry=registry, config_factory=failing_factory
        ).load([make_descriptor(tmp_path, "botpress-cfg")], FakeHost())

        assert "botpress-cfg" in loaded
        assert loaded["botpress-cfg"].configuration is None
        assert inits == [None]
        assert "Invalid module configuration in module botpress-cfg" in caplog.text

    @pytest.mark.asyncio
    async def test_init_failure_still_loads(self, tmp_path, caplog):
        async def init(bp, configuration, module_helpers):
            raise RuntimeError("cannot connect")

        registry = ExtensionRegistry()
        registry.register("botpress-init", {"init": init})

        loaded = await ExtensionLoader(tmp_path, registry=registry).load(
            [make_descriptor(tmp_path, "botpress-init")], FakeHost()
        )

        assert loaded["botpress-init"].handlers == {"init": init}
        assert "cannot connect" in caplog.text

    @pytest.mark.asyncio
    async def test_modules_initialize_one_after_another(self, tmp_path):
        registry = ExtensionRegistry()

        def make_init(name):
            async def init(bp, configuration, module_helpers):
                bp.events.append(f"start:{name}")
                await asyncio.sleep(0.01)
                bp.events.append(f"end:{name}")

            return init

        names = ["botpress-a", "botpress-b", "botpress-c"]
        for name in names:
            registry.register(name, {"init": make_init(name)})
        host = FakeHost()

        await ExtensionLoader(tmp_path, registry=registry).load(
            [make_descriptor(tmp_path, name) for name in names], host
        )

        expected = []
        for name in names:
            expected += [f"start:{name}", f"end:{name}"]
        assert host.events == expected

    @pytest.mark.asyncio
    async def test_config_factory_arguments(self, tmp_path):
        calls = []

        def factory(**kwargs):
            calls.append(kwargs)
            return "configured"

        registry = ExtensionRegistry()
        registry.register("botpress-opts", {"config": {"token": {"type": "string"}}})
        host = FakeHost(botfile={"modulesConfigDir": "settings"})

        await ExtensionLoader(
            tmp_path, kvs="kvs-handle", registry=registry, config_factory=factory
        ).load([make_descriptor(tmp_path, "botpress-opts")], host)

        assert calls == [
            {
                "kvs": "kvs-handle",
                "name": "botpress-opts",
                "botfile": {"modulesConfigDir": "settings"},
                "project_location": tmp_path,
                "options": {"token": {"type": "string"}},
            }
        ]

    @pytest.mark.asyncio
    async def test_summary_logged(self, tmp_path, caplog):
        registry = ExtensionRegistry()
        registry.register("botpress-x", {})
        registry.register("botpress-y", {})

        with caplog.at_level(logging.INFO):
            await ExtensionLoader(tmp_path, registry=registry).load(
                [make_descriptor(tmp_path, "botpress-x"), make_descriptor(tmp_path, "botpress-y")],
                FakeHost(),
            )

        assert "Loaded botpress-x, version 1.0.0" in caplog.text
        assert "Loaded 2 modules" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_batch(self, tmp_path, caplog):
        with caplog.at_level(logging.INFO):
            loaded = await ExtensionLoader(tmp_path).load([], FakeHost())

        assert loaded == {}
        assert "modules" not in caplog.text
