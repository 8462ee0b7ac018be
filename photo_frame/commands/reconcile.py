#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Reconcile command: one pass of the filesystem-wins reconciliation.
"""

from ..config import DEFAULT_MISSING_GRACE_SECONDS, StoragePaths
from ..jsonio import success
from ..reconcile.reconciler import Reconciler
from ..registry.reader import RegistryReader
from ..registry.writer import RegistryWriter
from ..storage.images import ImageStorage


def build_reconciler(paths: StoragePaths, grace_seconds: float = DEFAULT_MISSING_GRACE_SECONDS) -> Reconciler:
    return Reconciler(
        writer=RegistryWriter(paths.registry_file),
        reader=RegistryReader(paths.registry_file),
        storage=ImageStorage(paths.photos_dir),
        missing_grace_seconds=grace_seconds,
    )


def cmd_reconcile(paths: StoragePaths, grace_seconds: float = DEFAULT_MISSING_GRACE_SECONDS,
                  as_json: bool = False) -> int:
    result = build_reconciler(paths, grace_seconds).reconcile()
    if as_json:
        return success("reconcile", result.to_dict())
    print(f"Reconcile done. Added={result.added}, Tombstoned={result.tombstoned}")
    return 0
