"""Booted simulator discovery through ``xcrun simctl``."""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable

from .logs import get_logger
from .models import CaptureTarget
from .shell import Runner, run

RUNTIMES_COMMAND = "xcrun simctl list -v runtimes --json"
DEVICES_COMMAND = "xcrun simctl list -v devices booted --json"


def parse_udid(raw: object) -> uuid.UUID | None:
    """Parse a simulator UDID, returning None if it is not a UUID."""
    if not isinstance(raw, str):
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def _load_json(text: str | None) -> object:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def parse_runtime_identifiers(text: str | None) -> list[str]:
    """Extract runtime identifiers from ``simctl list runtimes --json`` output."""
    data = _load_json(text)
    if not isinstance(data, dict):
        return []
    runtimes = data.get("runtimes")
    if not isinstance(runtimes, list):
        return []
    return [
        runtime["identifier"]
        for runtime in runtimes
        if isinstance(runtime, dict) and isinstance(runtime.get("identifier"), str)
    ]


def parse_booted_devices(text: str | None, runtime_ids: Iterable[str]) -> list[CaptureTarget]:
    """Extract targets from ``simctl list devices booted --json`` output.

    The device listing is keyed by runtime identifier:

        {"devices": {"com.apple.CoreSimulator.SimRuntime.iOS-17-0": [...], ...}}

    Runtimes are visited in the given order; a runtime missing from the
    listing contributes no targets. Devices without a valid UDID or a name
    are skipped.
    """
    data = _load_json(text)
    if not isinstance(data, dict):
        return []
    devices_by_runtime = data.get("devices")
    if not isinstance(devices_by_runtime, dict):
        return []

    targets: list[CaptureTarget] = []
    for runtime_id in runtime_ids:
        devices = devices_by_runtime.get(runtime_id)
        if not isinstance(devices, list):
            continue
        for device in devices:
            if not isinstance(device, dict):
                continue
            udid = parse_udid(device.get("udid"))
            name = device.get("name")
            if udid is None or not isinstance(name, str):
                continue
            targets.append(CaptureTarget(udid=udid, name=name))
    return targets


def enumerate_targets(runner: Runner = run) -> list[CaptureTarget]:
    """List booted simulators across all installed runtimes.

    A failing query yields an empty list.
    """
    logger = get_logger()

    runtimes = runner(RUNTIMES_COMMAND)
    if not runtimes.succeeded:
        logger.debug("listing runtimes failed with status %d", runtimes.exit_code)
        return []
    runtime_ids = parse_runtime_identifiers(runtimes.stdout)

    devices = runner(DEVICES_COMMAND)
    if not devices.succeeded:
        logger.debug("listing devices failed with status %d", devices.exit_code)
        return []
    return parse_booted_devices(devices.stdout, runtime_ids)


def resolve_target(
    targets: list[CaptureTarget], explicit_id: str | None = None
) -> CaptureTarget | None:
    """Pick the simulator to record.

    Args:
        targets: Enumerated targets, in enumeration order.
        explicit_id: UDID requested by the user, if any.

    Returns:
        The matching target, the first target when no id is given, or
        None. An id that does not parse or matches nothing yields None.
    """
    if explicit_id is None:
        return targets[0] if targets else None

    wanted = parse_udid(explicit_id.strip())
    if wanted is None:
        get_logger().debug("invalid udid %r", explicit_id)
        return None
    return next((target for target in targets if target.udid == wanted), None)
