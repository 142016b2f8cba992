"""Tolerant decoding of inbound server payloads."""

from deserver_client.wire.decoder import (
    TimelineEntry,
    extract_bool,
    extract_command_array,
    extract_component_map,
    extract_float,
    extract_number_array,
    extract_string,
    extract_string_array,
    extract_timeline_entries,
)

__all__ = [
    "TimelineEntry",
    "extract_bool",
    "extract_command_array",
    "extract_component_map",
    "extract_float",
    "extract_number_array",
    "extract_string",
    "extract_string_array",
    "extract_timeline_entries",
]
