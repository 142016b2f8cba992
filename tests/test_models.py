"""
Tests for the typed command model and color parsing.
"""

import pytest

from deserver_client.commands.colors import parse_color
from deserver_client.commands.models import (
    CommandKind,
    CreateCommand,
    EditCommand,
    ModLoadCommand,
    TimelineCommand,
    TurnCommand,
    TweenCommand,
    parse_command,
)
from deserver_client.wire import TimelineEntry
from deserver_client.world import Vector3


class TestParseCommand:
    """Tests for parse_command."""

    def test_create_defaults(self):
        cmd = parse_command('{"cmd":"create","src":"Proto"}')
        assert isinstance(cmd, CreateCommand)
        assert cmd.kind is CommandKind.CREATE
        assert cmd.position == Vector3.zero()
        assert cmd.rotation == Vector3.zero()
        assert cmd.scale == Vector3.one()
        assert cmd.rename is None
        assert cmd.components == {}

    def test_create_fields(self):
        cmd = parse_command(
            '{"cmd":"create","src":"Proto","x":1,"y":2,"z":3,"ry":90,"sx":2,'
            '"rename":"Foo","color":"#FF0000","components":{"Rigidbody":true}}'
        )
        assert cmd.position == Vector3(1, 2, 3)
        assert cmd.rotation == Vector3(0, 90, 0)
        assert cmd.scale == Vector3(2, 1, 1)
        assert cmd.rename == "Foo"
        assert cmd.color == "#FF0000"
        assert cmd.components == {"Rigidbody": True}

    def test_cmd_is_case_insensitive(self):
        assert isinstance(parse_command('{"CMD":"EDIT","target":"Cube"}'), EditCommand)

    def test_edit_fields(self):
        cmd = parse_command(
            '{"cmd":"edit","target":"Cube","delete":true,"copytex":"Wall","text":"hello"}'
        )
        assert cmd.target == "Cube"
        assert cmd.delete is True
        assert cmd.copytex == "Wall"
        assert cmd.text == "hello"

    def test_tween_default_duration(self):
        cmd = parse_command('{"cmd":"tween","target":"Cube","dx":5}')
        assert isinstance(cmd, TweenCommand)
        assert cmd.duration == 1.0
        assert cmd.delta_position == Vector3(5, 0, 0)
        assert cmd.delta_scale.is_zero()

    def test_tween_scale_delta_uses_ds_prefix(self):
        cmd = parse_command('{"cmd":"tween","target":"Cube","dsx":1,"drz":45}')
        assert cmd.delta_scale == Vector3(1, 0, 0)
        assert cmd.delta_rotation == Vector3(0, 0, 45)

    def test_turn(self):
        cmd = parse_command('{"cmd":"turn","target":"Cube","dry":90,"duration":0}')
        assert isinstance(cmd, TurnCommand)
        assert cmd.delta_rotation == Vector3(0, 90, 0)
        assert cmd.duration == 0.0

    def test_timeline_sorted_entries_stable(self):
        cmd = TimelineCommand(
            label="intro",
            entries=(
                TimelineEntry(1.0, "a"),
                TimelineEntry(0.0, "b"),
                TimelineEntry(1.0, "c"),
            ),
        )
        assert [e.payload for e in cmd.sorted_entries()] == ["b", "a", "c"]

    def test_modload(self):
        assert parse_command('{"cmd":"modload","file":"mod.dll"}') == ModLoadCommand(file="mod.dll")

    @pytest.mark.parametrize("payload", ['{"cmd":"explode"}', '{"src":"Proto"}', "", None])
    def test_unknown_or_missing_cmd(self, payload):
        assert parse_command(payload) is None


class TestParseColor:
    """Tests for parse_color."""

    def test_bare_six_digit_hex(self):
        assert parse_color("FF0000") == (1.0, 0.0, 0.0, 1.0)

    def test_hash_forms(self):
        assert parse_color("#00FF00") == (0.0, 1.0, 0.0, 1.0)
        assert parse_color("#F00") == (1.0, 0.0, 0.0, 1.0)
        assert parse_color("#F008") == (1.0, 0.0, 0.0, 0x88 / 255.0)
        assert parse_color("#0000FF80") == (0.0, 0.0, 1.0, 0x80 / 255.0)

    def test_html_names(self):
        assert parse_color("red") == (1.0, 0.0, 0.0, 1.0)
        assert parse_color("Blue") == (0.0, 0.0, 1.0, 1.0)

    @pytest.mark.parametrize("value", [None, "", "none", "#GGGGGG", "12345", "notacolor"])
    def test_rejected(self, value):
        assert parse_color(value) is None
