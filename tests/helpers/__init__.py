"""Test helper utilities for the DEVX project."""

from tests.helpers.releases import NO_RETRY, asset_payload, make_tarball, release_payload

__all__ = ["NO_RETRY", "asset_payload", "make_tarball", "release_payload"]
