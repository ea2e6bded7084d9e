"""Tests for built-in and YAML user presets."""

import logging

import pytest
import yaml

from snapdust.core import (
    BUILTIN_PRESETS, PresetManager, SnapConfig, SnapConfigError, SnapPreset, Vec2,
    get_easing,
)


@pytest.fixture
def manager(tmp_path):
    return PresetManager(user_presets_dir=tmp_path / "presets")


def noop():
    pass


class TestBuiltin:
    def test_all_builtins_load(self, manager):
        assert set(BUILTIN_PRESETS) <= set(manager.list_all())
        assert all(manager.is_builtin(name) for name in BUILTIN_PRESETS)

    def test_thanos_matches_default_config(self, manager):
        config = manager.get("thanos").to_config(on_snapped=noop)
        assert config == SnapConfig(on_snapped=noop)

    def test_builtins_build_valid_configs(self, manager):
        for name in BUILTIN_PRESETS:
            assert isinstance(manager.get(name).to_config(on_snapped=noop), SnapConfig)

    def test_list_by_tag(self, manager):
        assert manager.list_by_tag("FAST") == ["quick_poof", "shatter"]

    def test_missing_preset(self, manager):
        assert manager.get("nope") is None
        assert not manager.exists("nope")


class TestToConfig:
    def test_overrides_win(self):
        preset = SnapPreset(name="p", bucket_count=8)
        config = preset.to_config(noop, seed=4, bucket_count=12, offset=Vec2(1, 2))
        assert config.bucket_count == 12
        assert config.offset == Vec2(1, 2)
        assert config.seed == 4

    def test_none_overrides_ignored(self):
        config = SnapPreset(name="p", duration_ms=900).to_config(noop, duration_ms=None)
        assert config.duration_ms == 900

    def test_invalid_values_rejected(self):
        with pytest.raises(SnapConfigError):
            SnapPreset(name="p", bucket_count=0).to_config(noop)

    def test_easing_carried_into_config(self):
        config = SnapPreset(name="p", easing="decelerate").to_config(noop)
        assert config.easing == "decelerate"
        assert config.curve is get_easing("decelerate")

    def test_unknown_easing_rejected(self):
        with pytest.raises(SnapConfigError):
            SnapPreset(name="p", easing="wobble").to_config(noop)


class TestFromDict:
    def test_unknown_keys_ignored(self):
        preset = SnapPreset.from_dict({"name": "p", "sparkle": True, "offset": [1, 2]})
        assert preset.offset == (1.0, 2.0)

    def test_name_required(self):
        with pytest.raises(SnapConfigError):
            SnapPreset.from_dict({"duration_ms": 100})

    def test_bad_pair(self):
        with pytest.raises(SnapConfigError):
            SnapPreset.from_dict({"name": "p", "offset": [1, 2, 3]})


class TestUserPresets:
    def test_save_and_reload(self, tmp_path, manager):
        preset = SnapPreset(name="mine", offset=(10, -5), bucket_count=5, tags=["custom"])
        path = manager.save_preset(preset)

        assert path == tmp_path / "presets" / "mine.yaml"
        reloaded = PresetManager(user_presets_dir=tmp_path / "presets").get("mine")
        assert reloaded == SnapPreset(name="mine", offset=(10.0, -5.0), bucket_count=5, tags=["custom"])

    def test_user_preset_overrides_builtin(self, tmp_path, manager):
        manager.save_preset(SnapPreset(name="thanos", duration_ms=1234))
        reloaded = PresetManager(user_presets_dir=tmp_path / "presets")
        assert reloaded.get("thanos").duration_ms == 1234
        assert not reloaded.is_builtin("thanos")

    def test_multi_preset_file(self, tmp_path):
        directory = tmp_path / "presets"
        directory.mkdir()
        (directory / "pack.yaml").write_text(yaml.dump({
            "presets": {
                "slow": {"duration_ms": 9000},
                "fast": {"duration_ms": 300, "tags": ["fast"]},
            }
        }))

        manager = PresetManager(user_presets_dir=directory)
        assert manager.get("slow").duration_ms == 9000
        assert "fast" in manager.list_by_tag("fast")

    def test_broken_file_is_skipped(self, tmp_path, caplog):
        directory = tmp_path / "presets"
        directory.mkdir()
        (directory / "broken.yaml").write_text("offset: [1, 2\n")

        with caplog.at_level(logging.WARNING):
            manager = PresetManager(user_presets_dir=directory)

        assert not manager.exists("broken")
        assert "broken.yaml" in caplog.text

    @pytest.mark.parametrize("body", [
        "presets:\n  - slow\n  - fast\n",
        "presets:\n",
        "presets: 12\n",
    ])
    def test_presets_key_must_be_a_mapping(self, tmp_path, caplog, body):
        directory = tmp_path / "presets"
        directory.mkdir()
        (directory / "pack.yaml").write_text(body)
        (directory / "good.yaml").write_text("duration_ms: 700\n")

        with caplog.at_level(logging.WARNING):
            manager = PresetManager(user_presets_dir=directory)

        assert manager.get("good").duration_ms == 700
        assert not manager.exists("pack")
        assert "pack.yaml" in caplog.text

    def test_user_presets_are_not_builtin(self, manager):
        manager.save_preset(SnapPreset(name="mine"))
        assert manager.exists("mine")
        assert not manager.is_builtin("mine")
