"""CLI command implementations."""

from .registry import cmd_list_alive, cmd_show_photo, cmd_tombstone
from .reconcile import cmd_reconcile, build_reconciler
from .scheduler import cmd_show_status, build_context
from .ingest import cmd_ingest, collect_sources
from .publish import cmd_publish
from .services import install_stop_handlers, run_scheduler, run_reconciler, run_processor

__all__ = [
    'cmd_list_alive', 'cmd_show_photo', 'cmd_tombstone',
    'cmd_reconcile', 'build_reconciler',
    'cmd_show_status', 'build_context',
    'cmd_ingest', 'collect_sources',
    'cmd_publish',
    'install_stop_handlers', 'run_scheduler', 'run_reconciler', 'run_processor',
]
