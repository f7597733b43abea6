"""Component comparison and transfer.

Modules:

- ``comparison`` -- ``build_comparison_table``: pure merge of two component
  lists into freshness-classified rows.
- ``engine``     -- ``SyncEngine``: backup, read source, overwrite destination.
- ``backup``     -- ``BackupStore``: write-once destination snapshots.
- ``reporter``   -- text and JSON rendering of tables and outcomes.

Usage example
-------------
::

    from uniform_sync.sync import SyncEngine, BackupStore, build_comparison_table

    rows = build_comparison_table(components_a, components_b)
    for row in rows:
        print(row.component_id, row.freshness_a, row.freshness_b)

    engine = SyncEngine(gateway, BackupStore(Path("backups")))
    outcome = engine.sync_component(project_b, project_a, "hero", backup=True)
"""

from .backup import BackupStore, backup_filename
from .comparison import build_comparison_table, filter_rows, index_components
from .engine import SyncEngine
from .reporter import (
    comparison_to_json,
    format_comparison_table,
    format_sync_outcome,
    outcome_to_json,
)

__all__ = [
    "BackupStore",
    "SyncEngine",
    "backup_filename",
    "build_comparison_table",
    "comparison_to_json",
    "filter_rows",
    "format_comparison_table",
    "format_sync_outcome",
    "index_components",
    "outcome_to_json",
]
